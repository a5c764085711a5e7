# -*- coding: utf-8 -*-
"""
Exceptions raised by translation backends
"""


class ProviderError(Exception):
    """Base class for every failure surfaced by a provider call"""


class ProviderConfigError(ProviderError):
    """Unknown provider id, missing credential or unsupported capability"""


class ProviderCallFailure(ProviderError):
    """Network error, timeout, non-2xx status or malformed response body"""
