# -*- coding: utf-8 -*-
"""
FastAPI dependencies shared by the admin routes
"""
import secrets

from fastapi import Header, HTTPException, Request
from loguru import logger

from transbot.container import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


async def require_admin(request: Request, x_api_key: str = Header(default="")) -> None:
    """
    Guard mutating routes with the shared `X-API-Key` secret

    With no key configured the dashboard stays open.
    """
    expected: str = request.app.state.api_key
    if not expected:
        return
    if not secrets.compare_digest(x_api_key.encode(), expected.encode()):
        logger.warning(f"Rejected admin call to {request.url.path} from {request.client.host if request.client else '?'}")
        raise HTTPException(status_code=403, detail="Forbidden: Invalid or missing API key")
