# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/11 16:12
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Request envelope and status models of the provider layer
"""
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


class ProviderRequest(BaseModel):
    url: str
    payload: Dict[str, Any]
    headers: Dict[str, str] = Field(default_factory=dict)


class ProviderStatus(BaseModel):
    available: bool
    provider: str
    status: Literal["online", "offline", "configured"]
    models: List[str] | None = Field(default=None)
    error: str | None = Field(default=None)


class ProviderInfo(BaseModel):
    key: str
    name: str
    requires_api_key: bool
    default_base_url: str
    default_model: str
    supports_ocr: bool = False
