# -*- coding: utf-8 -*-
"""
Per-message eligibility checks for the translation pipeline
"""
from dataclasses import dataclass
from typing import List

from loguru import logger

from models import AdmissionReason, ChannelRoute, InboundMessage, RoleKind
from settings import settings
from transbot.platform import ChatPlatform
from transbot.services.config_store import ConfigStore


@dataclass(frozen=True)
class Admission:
    proceed: bool
    reason: AdmissionReason
    route: ChannelRoute | None = None
    """
    Copy of the channel route taken at admission, used for the rest of the
    message even if the route is edited meanwhile
    """
    ocr_allowed: bool = False


def _reject(reason: AdmissionReason, route: ChannelRoute | None = None) -> Admission:
    return Admission(proceed=False, reason=reason, route=route)


class AccessGate:
    """Service for deciding whether a channel message is translated"""

    def __init__(
        self, store: ConfigStore, platform: ChatPlatform, command_prefix: str = settings.COMMAND_PREFIX
    ):
        self._store = store
        self._platform = platform
        self._prefix = command_prefix

    async def evaluate(self, message: InboundMessage) -> Admission:
        """
        Run the checks in order and stop at the first failure

        1. Author is a human and the message was posted in a guild
        2. Message is not a prefix command
        3. The channel has a route
        4. The route is not disabled
        5. The author is not on the ignore list
        6. The author holds one of the allowed roles, when the channel restricts them

        OCR is allowed only once all of the above passed, the message carries an
        image, the route enables OCR and the author holds one of the OCR roles
        when that set is non-empty. Role membership is fetched live, at most
        once per message. If it cannot be fetched the message is rejected when
        the channel restricts allowed roles, otherwise only OCR is turned off.

        Args:
            message: Platform-neutral message

        Returns:
            The decision, with a snapshot of the route when one exists
        """
        if message.author_is_bot:
            return _reject(AdmissionReason.BOT_AUTHOR)
        if not message.guild_id:
            return _reject(AdmissionReason.DIRECT_MESSAGE)
        if message.content.startswith(self._prefix):
            return _reject(AdmissionReason.COMMAND)

        route = self._store.route(message.channel_id)
        if route is None:
            return _reject(AdmissionReason.NO_ROUTE)
        route = route.model_copy()

        if route.enabled is False:
            return _reject(AdmissionReason.DISABLED, route)
        if self._store.is_ignored(message.author_id):
            return _reject(AdmissionReason.IGNORED_USER, route)

        allowed = self._store.roles(RoleKind.ALLOWED, message.channel_id)
        wants_ocr = bool(route.enable_ocr and message.image_attachments)
        ocr_roles = self._store.roles(RoleKind.OCR, message.channel_id) if wants_ocr else []

        member_roles: List[str] = []
        if allowed or ocr_roles:
            try:
                member_roles = await self._platform.fetch_member_role_ids(
                    message.guild_id, message.author_id
                )
            except Exception as err:
                logger.warning(
                    f"Failed to fetch roles of {message.author_id} in {message.guild_id}: {err!r}"
                )
                if allowed:
                    return _reject(AdmissionReason.ROLE_LOOKUP_FAILED, route)
                # Only the OCR rule needed the roles: translate the text, skip the image
                return Admission(proceed=True, reason=AdmissionReason.ADMITTED, route=route)

        if allowed and not any(r.id in member_roles for r in allowed):
            return _reject(AdmissionReason.MISSING_ROLE, route)

        ocr_allowed = wants_ocr and (not ocr_roles or any(r.id in member_roles for r in ocr_roles))

        return Admission(
            proceed=True, reason=AdmissionReason.ADMITTED, route=route, ocr_allowed=ocr_allowed
        )

    async def has_any_role(self, guild_id: str, user_id: str, role_ids: List[str]) -> bool:
        """Live check used by the chat commands for admin roles"""
        if not role_ids:
            return False
        try:
            member_roles = await self._platform.fetch_member_role_ids(guild_id, user_id)
        except Exception as err:
            logger.warning(f"Failed to fetch roles of {user_id} in {guild_id}: {err!r}")
            return False
        return any(role_id in member_roles for role_id in role_ids)
