# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/14 10:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Admin HTTP surface: status, configuration, logs, history and ad-hoc translation

Every mutation goes through the ConfigStore (debounced write) and leaves an
`info` entry in the event log.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from dashboard.deps import get_services, require_admin
from dashboard.schemas import (
    ChannelCreate,
    ChannelUpdate,
    OcrRequest,
    OcrTranslateRequest,
    RoleRequest,
    SettingsUpdate,
    TranslateRequest,
)
from models import RoleEntry, RoleKind
from providers import ProviderCallFailure
from transbot.container import Services

router = APIRouter(prefix="/api")

admin = [Depends(require_admin)]


async def _decorated_channels(services: Services) -> List[Dict[str, Any]]:
    directory = services.directory
    channels = []
    for channel_id, route in services.store.config.channels.items():
        channel_name = route.channel_name or await directory.channel_label(
            route.guild_id, channel_id
        )
        channels.append(
            {
                "id": channel_id,
                **route.model_dump(by_alias=True),
                "channelName": channel_name,
                "guildName": await directory.guild_label(route.guild_id),
            }
        )
    return channels


def _settings_view(services: Services) -> Dict[str, Any]:
    store = services.store
    return {
        "showDebug": services.events.show_debug,
        "logChannel": store.config.log_channel,
        "debugLogChannel": store.config.debug_log_channel,
        "model": store.model,
        "ocrModel": store.ocr_model,
        "aiProvider": store.provider,
        "hasApiKey": bool(store.config.ai_api_key),
        "aiBaseUrl": store.config.ai_base_url,
        "ollamaUrl": store.ollama_url,
    }


def _roles_dump(roles: List[RoleEntry]) -> List[Dict[str, str]]:
    return [r.model_dump() for r in roles]


# ---------------------------------------------------------------------
# Read-only views
# ---------------------------------------------------------------------


@router.get("/status")
async def get_status(services: Services = Depends(get_services)):
    ai_status = await services.registry.check_status(services.store.ai_config())
    return {
        "bot": services.platform.bot_status(),
        "ollama": ai_status.model_dump(exclude_none=True),
        "channels": await _decorated_channels(services),
    }


@router.get("/config")
async def get_config(services: Services = Depends(get_services)):
    config = services.store.config
    ignored = []
    for user_id in config.ignored_users:
        info = await services.directory.user_info(user_id)
        ignored.append(
            {
                "id": user_id,
                "username": info.username if info else user_id,
                "avatar": info.avatar if info else None,
            }
        )

    return {
        "ignoredUsers": ignored,
        "allowedRoles": {k: _roles_dump(v) for k, v in config.allowed_roles.items()},
        "ocrRoles": {k: _roles_dump(v) for k, v in config.ocr_roles.items()},
        "adminRoles": _roles_dump(config.admin_roles),
        "channels": await _decorated_channels(services),
        "aiProvider": services.store.provider,
        "hasApiKey": bool(config.ai_api_key),
        "aiBaseUrl": config.ai_base_url,
    }


@router.get("/settings")
async def get_settings(services: Services = Depends(get_services)):
    return _settings_view(services)


@router.get("/logs")
async def get_logs(services: Services = Depends(get_services)):
    return [entry.model_dump(mode="json") for entry in services.events.for_api()]


@router.get("/history")
async def get_history(services: Services = Depends(get_services)):
    return [record.model_dump(mode="json", by_alias=True) for record in services.history.latest()]


@router.get("/stats")
async def get_stats(services: Services = Depends(get_services)):
    return services.stats.snapshot()


@router.get("/models")
async def get_models(services: Services = Depends(get_services)):
    store = services.store
    config = store.ai_config()
    provider = services.registry.get(config.provider)
    try:
        models = await provider.list_models(config)
    except ProviderCallFailure as err:
        services.events.error(str(err))
        raise HTTPException(status_code=500, detail=f"Failed to fetch models from {provider.display_name}")

    payload = {
        "provider": config.provider,
        "models": models,
        "current": store.model,
        "ocrCurrent": store.ocr_model,
    }
    if provider.requires_api_key:
        payload["requiresApiKey"] = True
    return payload


@router.get("/admin-roles")
async def get_admin_roles(services: Services = Depends(get_services)):
    return {"adminRoles": _roles_dump(services.store.config.admin_roles)}


# ---------------------------------------------------------------------
# Channel routes
# ---------------------------------------------------------------------


@router.post("/channels", dependencies=admin)
async def create_channel(body: ChannelCreate, services: Services = Depends(get_services)):
    channel_name = (
        await services.directory.channel_name(body.guild_id, body.channel_id) or body.channel_id
    )
    services.store.set_route(
        body.channel_id, body.language, guild_id=body.guild_id, channel_name=channel_name
    )
    services.events.info(f"Added translation channel: #{channel_name} → {body.language}")
    return {"success": True}


@router.put("/channels/{channel_id}", dependencies=admin)
async def update_channel(
    channel_id: str, body: ChannelUpdate, services: Services = Depends(get_services)
):
    route = services.store.update_route(
        channel_id, language=body.language, enabled=body.enabled, enable_ocr=body.enable_ocr
    )
    if route is None:
        raise HTTPException(status_code=404, detail="Channel not found")
    services.events.info(f"Updated channel #{route.channel_name or channel_id}")
    return {"success": True}


@router.delete("/channels/{channel_id}", dependencies=admin)
async def delete_channel(channel_id: str, services: Services = Depends(get_services)):
    route = services.store.remove_route(channel_id)
    if route is None:
        raise HTTPException(status_code=404, detail="Channel not found")
    services.events.info(f"Removed translation channel: #{route.channel_name or channel_id}")
    return {"success": True}


# ---------------------------------------------------------------------
# Role rules, admin roles and the ignore list
# ---------------------------------------------------------------------


async def _add_channel_role(
    services: Services, kind: RoleKind, channel_id: str, body: RoleRequest, label: str
):
    guild_id = body.guild_id
    if not guild_id and (route := services.store.route(channel_id)):
        guild_id = route.guild_id
    role_name = await services.directory.role_name(guild_id, body.role_id) or body.role_id
    if services.store.add_role(kind, channel_id, RoleEntry(id=body.role_id, name=role_name)):
        services.events.info(f"Added {label} role: {role_name}")
    return {"success": True}


async def _remove_channel_role(
    services: Services, kind: RoleKind, channel_id: str, role_id: str, label: str
):
    if services.store.remove_role(kind, channel_id, role_id):
        services.events.info(f"Removed {label} role: {role_id}")
    return {"success": True}


@router.post("/roles/{channel_id}", dependencies=admin)
async def add_allowed_role(
    channel_id: str, body: RoleRequest, services: Services = Depends(get_services)
):
    return await _add_channel_role(services, RoleKind.ALLOWED, channel_id, body, "allowed")


@router.delete("/roles/{channel_id}/{role_id}", dependencies=admin)
async def remove_allowed_role(
    channel_id: str, role_id: str, services: Services = Depends(get_services)
):
    return await _remove_channel_role(services, RoleKind.ALLOWED, channel_id, role_id, "allowed")


@router.post("/ocr-roles/{channel_id}", dependencies=admin)
async def add_ocr_role(
    channel_id: str, body: RoleRequest, services: Services = Depends(get_services)
):
    return await _add_channel_role(services, RoleKind.OCR, channel_id, body, "OCR")


@router.delete("/ocr-roles/{channel_id}/{role_id}", dependencies=admin)
async def remove_ocr_role(
    channel_id: str, role_id: str, services: Services = Depends(get_services)
):
    return await _remove_channel_role(services, RoleKind.OCR, channel_id, role_id, "OCR")


@router.post("/admin-roles", dependencies=admin)
async def add_admin_role(body: RoleRequest, services: Services = Depends(get_services)):
    store = services.store
    guild_id = body.guild_id
    if not guild_id:
        guild_ids = [r.guild_id for r in store.config.channels.values() if r.guild_id]
        guild_id = guild_ids[0] if guild_ids else services.platform.default_guild_id()

    role_name = await services.directory.role_name(guild_id, body.role_id) or body.role_id
    if store.add_admin_role(RoleEntry(id=body.role_id, name=role_name)):
        services.events.info(f"Added admin role: {role_name}")
    return {"success": True, "adminRoles": _roles_dump(store.config.admin_roles)}


@router.delete("/admin-roles/{role_id}", dependencies=admin)
async def remove_admin_role(role_id: str, services: Services = Depends(get_services)):
    store = services.store
    if store.remove_admin_role(role_id):
        services.events.info(f"Removed admin role: {role_id}")
    return {"success": True, "adminRoles": _roles_dump(store.config.admin_roles)}


@router.post("/ignore/{user_id}", dependencies=admin)
async def ignore_user(user_id: str, services: Services = Depends(get_services)):
    if services.store.ignore_user(user_id):
        services.events.info(f"Ignored user: {user_id}")
    return {"success": True}


@router.delete("/ignore/{user_id}", dependencies=admin)
async def unignore_user(user_id: str, services: Services = Depends(get_services)):
    if services.store.unignore_user(user_id):
        services.events.info(f"Stopped ignoring user: {user_id}")
    return {"success": True}


# ---------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------


@router.put("/settings", dependencies=admin)
async def update_settings(body: SettingsUpdate, services: Services = Depends(get_services)):
    store, events = services.store, services.events
    given = body.model_fields_set

    if "ai_provider" in given and body.ai_provider not in services.registry:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown provider '{body.ai_provider}'. "
            f"Available: {', '.join(services.registry.keys)}",
        )

    if "show_debug" in given:
        events.show_debug = bool(body.show_debug)
    if "log_channel" in given:
        store.set_log_channel(body.log_channel)
        events.info(
            f"Log channel set to: {body.log_channel}" if body.log_channel else "Log channel disabled"
        )
    if "debug_log_channel" in given:
        store.set_debug_log_channel(body.debug_log_channel)
        events.info(
            f"Debug log channel set to: {body.debug_log_channel}"
            if body.debug_log_channel
            else "Debug log channel disabled"
        )
    if "model" in given:
        store.set_model(body.model)
        events.info(f"Translation model changed to: {store.model}")
    if "ocr_model" in given:
        store.set_ocr_model(body.ocr_model)
        events.info(
            f"OCR model changed to: {body.ocr_model}" if body.ocr_model else "OCR model reset to default"
        )
    if "ai_provider" in given:
        store.set_provider(body.ai_provider)
        events.info(f"AI provider changed to: {body.ai_provider}")
    if "ai_api_key" in given:
        store.set_api_key(body.ai_api_key)
        events.info("API key updated" if body.ai_api_key else "API key cleared")
    if "ai_base_url" in given:
        store.set_base_url(body.ai_base_url)
        events.info(
            f"Cloud Base URL updated: {body.ai_base_url}" if body.ai_base_url else "Cloud Base URL cleared"
        )
    if "ollama_url" in given:
        store.set_ollama_url(body.ollama_url)
        events.info(
            f"Ollama URL updated: {body.ollama_url}" if body.ollama_url else "Ollama URL reset to default"
        )

    return {"success": True, **_settings_view(services)}


# ---------------------------------------------------------------------
# Ad-hoc translation
# ---------------------------------------------------------------------


@router.post("/translate")
async def translate(body: TranslateRequest, services: Services = Depends(get_services)):
    translation = await services.pipeline.translate(body.text, body.language)
    return {"original": body.text, "translation": translation, "language": body.language}


@router.post("/ocr")
async def ocr(body: OcrRequest, services: Services = Depends(get_services)):
    return {"extractedText": await services.pipeline.extract_text(body.image)}


@router.post("/ocr-translate")
async def ocr_translate(body: OcrTranslateRequest, services: Services = Depends(get_services)):
    extracted = await services.pipeline.extract_text(body.image)
    translation = await services.pipeline.translate(extracted, body.language, is_ocr=True)
    return {"extractedText": extracted, "translation": translation, "language": body.language}
