# -*- coding: utf-8 -*-

from .command_handler import TranslateGroup
from .message_handler import handle_message, to_inbound

__all__ = ["TranslateGroup", "handle_message", "to_inbound"]
