# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional, Protocol, Sequence

import aiohttp

from common.config import CURRENT_VERSION
from common.constants import API_BASE_URL, FETCH_LIMIT
from common.rate_limiter import ActionType, RateLimitManager
from delivery.errors import (
    GatewayHTTPError,
    GatewayResponseError,
    GatewayTransportError,
    RateLimitedError,
)
from delivery.models import MessageFile, RemoteMessage

logger = logging.getLogger("delivery.gateway")

USER_AGENT = f"DiscordBot (https://github.com/discord-delivery/discord-delivery, {CURRENT_VERSION})"


class MessagingGateway(Protocol):
    async def get_recent_messages(
        self, channel_id: str, limit: int = FETCH_LIMIT
    ) -> list[RemoteMessage]: ...

    async def bulk_delete(self, channel_id: str, message_ids: Sequence[str]) -> None: ...

    async def delete_one(self, channel_id: str, message_id: str) -> None: ...

    async def create_message(
        self,
        channel_id: str,
        payload: dict[str, Any],
        files: Sequence[MessageFile] = (),
    ) -> str: ...


class DiscordGateway:
    """
    Minimal Discord REST client covering the four calls the delivery engine needs.

    Every request is paced through the RateLimitManager, keyed by action and
    channel. A 429 puts the limiter into cooldown for ``retry_after`` seconds and
    surfaces as RateLimitedError; the call itself is not repeated.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = API_BASE_URL,
        timeout: float = 15.0,
        ratelimit: Optional[RateLimitManager] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.ratelimit = ratelimit or RateLimitManager()
        self.session = session
        self._owns_session = False
        self._headers = {
            "Authorization": f"Bot {token}",
            "User-Agent": USER_AGENT,
        }

    async def open(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True

    async def close(self) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()
        self._owns_session = False

    async def __aenter__(self) -> "DiscordGateway":
        await self.open()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    @staticmethod
    async def _read_body(resp) -> Any:
        try:
            return await resp.json(content_type=None)
        except (ValueError, aiohttp.ContentTypeError):
            return await resp.text()

    @staticmethod
    def _message_id(body: Any) -> str:
        try:
            return str(body["id"])
        except (KeyError, TypeError) as e:
            raise GatewayResponseError(f"Created message has no id: {body!r:.200}") from e

    async def _request(
        self,
        action: ActionType,
        channel_id: str,
        method: str,
        path: str,
        **kwargs,
    ) -> Any:
        wait = self.ratelimit.remaining(action, key=channel_id)
        if wait > 0:
            logger.debug(
                "[⏳] Waiting %.2fs for %s cooldown on channel %s",
                wait,
                action.value,
                channel_id,
            )
        await self.ratelimit.acquire(action, key=channel_id)
        if self.session is None or self.session.closed:
            await self.open()

        url = f"{self.base_url}{path}"
        try:
            async with self.session.request(
                method, url, headers=self._headers, **kwargs
            ) as resp:
                if resp.status == 204:
                    return None
                body = await self._read_body(resp)
                if resp.status == 429:
                    retry_after = 1.0
                    if isinstance(body, dict):
                        retry_after = float(body.get("retry_after") or retry_after)
                    self.ratelimit.penalize(action, retry_after, key=channel_id)
                    logger.warning(
                        "[⏳] Rate limited on %s %s; cooling down %.2fs",
                        method,
                        path,
                        retry_after,
                    )
                    raise RateLimitedError(retry_after)
                if resp.status >= 400:
                    if isinstance(body, dict):
                        raise GatewayHTTPError(
                            resp.status, str(body.get("message") or ""), body.get("code")
                        )
                    raise GatewayHTTPError(resp.status, str(body or "")[:200])
                return body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise GatewayTransportError(f"{method} {path} failed: {e!r}") from e

    async def get_recent_messages(
        self, channel_id: str, limit: int = FETCH_LIMIT
    ) -> list[RemoteMessage]:
        body = await self._request(
            ActionType.FETCH_MESSAGES,
            channel_id,
            "GET",
            f"/channels/{channel_id}/messages",
            params={"limit": str(limit)},
        )
        try:
            return [RemoteMessage.from_api(m) for m in body or []]
        except (KeyError, TypeError, ValueError) as e:
            raise GatewayResponseError(
                f"Unexpected message list for channel {channel_id}: {e}"
            ) from e

    async def bulk_delete(self, channel_id: str, message_ids: Sequence[str]) -> None:
        await self._request(
            ActionType.BULK_DELETE,
            channel_id,
            "POST",
            f"/channels/{channel_id}/messages/bulk-delete",
            json={"messages": [str(m) for m in message_ids]},
        )

    async def delete_one(self, channel_id: str, message_id: str) -> None:
        await self._request(
            ActionType.DELETE_MESSAGE,
            channel_id,
            "DELETE",
            f"/channels/{channel_id}/messages/{message_id}",
        )

    async def create_message(
        self,
        channel_id: str,
        payload: dict[str, Any],
        files: Sequence[MessageFile] = (),
    ) -> str:
        path = f"/channels/{channel_id}/messages"
        if not files:
            body = await self._request(
                ActionType.CREATE_MESSAGE, channel_id, "POST", path, json=payload
            )
            return self._message_id(body)

        payload = {
            **payload,
            "attachments": [
                {"id": i, "filename": f.name} for i, f in enumerate(files)
            ],
        }
        form = aiohttp.FormData()
        form.add_field(
            "payload_json", json.dumps(payload), content_type="application/json"
        )
        for i, f in enumerate(files):
            form.add_field(
                f"files[{i}]",
                f.data,
                filename=f.name,
                content_type=f.content_type or "application/octet-stream",
            )
        body = await self._request(
            ActionType.CREATE_MESSAGE, channel_id, "POST", path, data=form
        )
        return self._message_id(body)
