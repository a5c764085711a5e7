# -*- coding: utf-8 -*-

from .prefix_commands import handle_prefix_command, parse_prefix_command
from .slash_commands import TranslateGroup

__all__ = ["handle_prefix_command", "parse_prefix_command", "TranslateGroup"]
