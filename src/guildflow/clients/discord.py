# src/guildflow/clients/discord.py
"""Discord REST v10 action client.

Implements the ActionClient protocol over httpx.AsyncClient. Rate-limited
(429) and server-error (5xx) responses, and transport errors, are retried
with exponential jitter backoff; a 429's retry_after is honoured as a lower
bound on the wait. Every other failure surfaces as ActionClientError.

Categories deny a fixed permission set to @everyone, so a session's
channels are invisible to non-participants. Channels then grant either the
writer or the reader permission set per role.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable, Sequence
from enum import IntFlag
from typing import Any

import httpx
import structlog
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from guildflow.contracts.enums import ChannelType
from guildflow.contracts.errors import ActionClientError
from guildflow.contracts.records import CreatedChannel, CreatedRole, GuildMember, OutgoingFile
from guildflow.core.config import ApiSettings, RetrySettings

logger = structlog.get_logger(__name__)


class Permission(IntFlag):
    """Discord permission bits used by guildflow."""

    CREATE_INSTANT_INVITE = 1 << 0
    MANAGE_CHANNELS = 1 << 4
    ADD_REACTIONS = 1 << 6
    PRIORITY_SPEAKER = 1 << 8
    STREAM = 1 << 9
    VIEW_CHANNEL = 1 << 10
    SEND_MESSAGES = 1 << 11
    SEND_TTS_MESSAGES = 1 << 12
    MANAGE_MESSAGES = 1 << 13
    EMBED_LINKS = 1 << 14
    ATTACH_FILES = 1 << 15
    READ_MESSAGE_HISTORY = 1 << 16
    MENTION_EVERYONE = 1 << 17
    USE_EXTERNAL_EMOJIS = 1 << 18
    CONNECT = 1 << 20
    SPEAK = 1 << 21
    MUTE_MEMBERS = 1 << 22
    DEAFEN_MEMBERS = 1 << 23
    MOVE_MEMBERS = 1 << 24
    USE_VAD = 1 << 25
    MANAGE_WEBHOOKS = 1 << 29
    USE_APPLICATION_COMMANDS = 1 << 31
    REQUEST_TO_SPEAK = 1 << 32
    MANAGE_EVENTS = 1 << 33
    MANAGE_THREADS = 1 << 34
    CREATE_PUBLIC_THREADS = 1 << 35
    CREATE_PRIVATE_THREADS = 1 << 36
    USE_EXTERNAL_STICKERS = 1 << 37
    SEND_MESSAGES_IN_THREADS = 1 << 38
    USE_EMBEDDED_ACTIVITIES = 1 << 39
    USE_SOUNDBOARD = 1 << 42
    USE_EXTERNAL_SOUNDS = 1 << 45
    SEND_VOICE_MESSAGES = 1 << 46
    PIN_MESSAGES = 1 << 51
    BYPASS_SLOWMODE = 1 << 52


_GENERAL = Permission.VIEW_CHANNEL | Permission.MANAGE_CHANNELS | Permission.MANAGE_WEBHOOKS | Permission.CREATE_INSTANT_INVITE

_TEXT = (
    Permission.SEND_MESSAGES
    | Permission.SEND_MESSAGES_IN_THREADS
    | Permission.CREATE_PUBLIC_THREADS
    | Permission.CREATE_PRIVATE_THREADS
    | Permission.EMBED_LINKS
    | Permission.ATTACH_FILES
    | Permission.ADD_REACTIONS
    | Permission.USE_EXTERNAL_EMOJIS
    | Permission.USE_EXTERNAL_STICKERS
    | Permission.MENTION_EVERYONE
    | Permission.MANAGE_MESSAGES
    | Permission.MANAGE_THREADS
    | Permission.READ_MESSAGE_HISTORY
    | Permission.SEND_TTS_MESSAGES
    | Permission.SEND_VOICE_MESSAGES
    | Permission.PIN_MESSAGES
    | Permission.USE_APPLICATION_COMMANDS
    | Permission.BYPASS_SLOWMODE
)

_VOICE = (
    Permission.CONNECT
    | Permission.SPEAK
    | Permission.STREAM
    | Permission.USE_EMBEDDED_ACTIVITIES
    | Permission.USE_SOUNDBOARD
    | Permission.USE_EXTERNAL_SOUNDS
    | Permission.USE_VAD
    | Permission.PRIORITY_SPEAKER
    | Permission.MUTE_MEMBERS
    | Permission.DEAFEN_MEMBERS
    | Permission.MOVE_MEMBERS
    | Permission.REQUEST_TO_SPEAK
    | Permission.MANAGE_EVENTS
)

CHANNEL_PERMISSIONS = _GENERAL | _TEXT | _VOICE
"""Denied to @everyone on every session category"""

READER_PERMISSIONS = (
    Permission.VIEW_CHANNEL
    | Permission.READ_MESSAGE_HISTORY
    | Permission.CONNECT
    | Permission.SPEAK
    | Permission.USE_VAD
    | Permission.BYPASS_SLOWMODE
)

WRITER_PERMISSIONS = (
    Permission.ADD_REACTIONS
    | Permission.STREAM
    | Permission.VIEW_CHANNEL
    | Permission.SEND_MESSAGES
    | Permission.SEND_TTS_MESSAGES
    | Permission.MANAGE_MESSAGES
    | Permission.EMBED_LINKS
    | Permission.ATTACH_FILES
    | Permission.READ_MESSAGE_HISTORY
    | Permission.MENTION_EVERYONE
    | Permission.USE_EXTERNAL_EMOJIS
    | Permission.CONNECT
    | Permission.SPEAK
    | Permission.USE_VAD
    | Permission.MANAGE_THREADS
    | Permission.CREATE_PUBLIC_THREADS
    | Permission.SEND_MESSAGES_IN_THREADS
    | Permission.SEND_VOICE_MESSAGES
    | Permission.PIN_MESSAGES
    | Permission.BYPASS_SLOWMODE
)

_CATEGORY_CHANNEL_TYPE = 4
_CHANNEL_TYPE_CODES = {ChannelType.TEXT: 0, ChannelType.VOICE: 2}
_ROLE_OVERWRITE = 0


class _RetryableResponse(Exception):
    """A 429 or 5xx answer worth another attempt."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.retry_after = _retry_after(response)
        super().__init__(f"HTTP {response.status_code}")


def _retry_after(response: httpx.Response) -> float | None:
    if response.status_code != 429:
        return None
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    if isinstance(body, dict) and isinstance(body.get("retry_after"), int | float):
        return float(body["retry_after"])
    header = response.headers.get("Retry-After")
    if header is None:
        return None
    try:
        return float(header)
    except ValueError:
        return None


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and "message" in body:
        return str(body["message"])
    return response.reason_phrase


def _decode[T](operation: str, response: httpx.Response, parse: Callable[[Any], T]) -> T:
    """Parse a success body. A body that is not the expected JSON is an ActionClientError."""
    try:
        return parse(response.json())
    except (ValueError, KeyError, TypeError) as exc:
        raise ActionClientError(
            operation, f"unexpected response body ({type(exc).__name__})", status_code=response.status_code
        ) from exc


def _created_role(body: Any) -> CreatedRole:
    return CreatedRole(id=str(body["id"]), name=str(body["name"]))


def _created_channel(body: Any) -> CreatedChannel:
    return CreatedChannel(id=str(body["id"]), name=str(body["name"]))


def _members(body: Any) -> list[GuildMember]:
    return [
        GuildMember(id=str(member["user"]["id"]), role_ids=tuple(str(r) for r in member.get("roles", [])))
        for member in body
    ]


def _role_overwrites(writer_role_ids: Sequence[str], reader_role_ids: Sequence[str]) -> list[dict[str, Any]]:
    return [
        *({"id": role_id, "type": _ROLE_OVERWRITE, "allow": str(int(WRITER_PERMISSIONS))} for role_id in writer_role_ids),
        *({"id": role_id, "type": _ROLE_OVERWRITE, "allow": str(int(READER_PERMISSIONS))} for role_id in reader_role_ids),
    ]


class _BackoffWithRetryAfter:
    """Exponential jitter backoff that never waits less than the server asked for."""

    def __init__(self, retry: RetrySettings) -> None:
        self._backoff = wait_exponential_jitter(
            initial=retry.initial_delay_seconds,
            max=retry.max_delay_seconds,
            exp_base=retry.exponential_base,
            jitter=retry.jitter_seconds,
        )

    def __call__(self, retry_state: RetryCallState) -> float:
        delay = self._backoff(retry_state)
        outcome = retry_state.outcome
        if outcome is not None and outcome.failed:
            error = outcome.exception()
            if isinstance(error, _RetryableResponse) and error.retry_after is not None:
                return max(delay, error.retry_after)
        return delay


class DiscordActionClient:
    """ActionClient for the Discord REST API.

    Example:
        async with DiscordActionClient(token, api=settings.api, retry=settings.retry) as client:
            role = await client.create_role(guild_id, "GM")
    """

    def __init__(
        self,
        token: str,
        *,
        api: ApiSettings | None = None,
        retry: RetrySettings | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api = api if api is not None else ApiSettings()
        self._retry = retry if retry is not None else RetrySettings()
        self._sleep = sleep
        self._http = httpx.AsyncClient(
            base_url=self._api.base_url + "/",
            headers={"Authorization": f"Bot {token}", "User-Agent": self._api.user_agent},
            timeout=self._api.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> DiscordActionClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request with retries.

        Raises:
            ActionClientError: On a non-2xx answer or exhausted retries
        """
        log = logger.bind(operation=operation, method=method, path=path)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry.max_attempts),
                wait=_BackoffWithRetryAfter(self._retry),
                retry=retry_if_exception_type((_RetryableResponse, httpx.TransportError)),
                sleep=self._sleep,
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        log.info("Retrying request", attempt=attempt.retry_state.attempt_number)
                    response = await self._http.request(method, path, **kwargs)
                    if response.status_code == 429 or response.status_code >= 500:
                        raise _RetryableResponse(response)
        except _RetryableResponse as exc:
            raise ActionClientError(
                operation, _error_detail(exc.response), status_code=exc.response.status_code
            ) from exc
        except httpx.TransportError as exc:
            raise ActionClientError(operation, f"{type(exc).__name__}: {exc}") from exc

        if response.is_error:
            raise ActionClientError(operation, _error_detail(response), status_code=response.status_code)
        log.debug("Request succeeded", status_code=response.status_code)
        return response

    # === Roles ===

    async def create_role(self, guild_id: str, name: str) -> CreatedRole:
        response = await self._request(
            "create_role", "POST", f"guilds/{guild_id}/roles", json={"name": name, "mentionable": True}
        )
        return _decode("create_role", response, _created_role)

    async def delete_role(self, guild_id: str, role_id: str) -> None:
        await self._request("delete_role", "DELETE", f"guilds/{guild_id}/roles/{role_id}")

    # === Channels ===

    async def create_category(self, guild_id: str, name: str) -> CreatedChannel:
        """Create a category hidden from @everyone."""
        response = await self._request(
            "create_category",
            "POST",
            f"guilds/{guild_id}/channels",
            json={
                "name": name,
                "type": _CATEGORY_CHANNEL_TYPE,
                "permission_overwrites": [
                    {"id": guild_id, "type": _ROLE_OVERWRITE, "deny": str(int(CHANNEL_PERMISSIONS))},
                ],
            },
        )
        return _decode("create_category", response, _created_channel)

    async def create_channel(
        self,
        guild_id: str,
        parent_category_id: str,
        name: str,
        channel_type: ChannelType,
        writer_role_ids: Sequence[str],
        reader_role_ids: Sequence[str],
    ) -> CreatedChannel:
        response = await self._request(
            "create_channel",
            "POST",
            f"guilds/{guild_id}/channels",
            json={
                "name": name,
                "type": _CHANNEL_TYPE_CODES[channel_type],
                "parent_id": parent_category_id,
                "permission_overwrites": _role_overwrites(writer_role_ids, reader_role_ids),
            },
        )
        return _decode("create_channel", response, _created_channel)

    async def delete_channel(self, guild_id: str, channel_id: str) -> None:
        # Channel ids are global; guild_id is kept for protocol symmetry.
        await self._request("delete_channel", "DELETE", f"channels/{channel_id}")

    async def change_channel_permissions(
        self,
        channel_id: str,
        writer_role_ids: Sequence[str],
        reader_role_ids: Sequence[str],
    ) -> None:
        """Replace the channel's overwrites. Roles not listed lose theirs."""
        await self._request(
            "change_channel_permissions",
            "PATCH",
            f"channels/{channel_id}",
            json={"permission_overwrites": _role_overwrites(writer_role_ids, reader_role_ids)},
        )

    # === Messages ===

    async def send_message(self, channel_id: str, content: str, files: Sequence[OutgoingFile] = ()) -> str:
        """Post a message, as multipart when files are attached. Returns the message id."""
        path = f"channels/{channel_id}/messages"
        if not files:
            response = await self._request("send_message", "POST", path, json={"content": content})
        else:
            payload = {
                "content": content,
                "attachments": [{"id": index, "filename": f.file_name} for index, f in enumerate(files)],
            }
            response = await self._request(
                "send_message",
                "POST",
                path,
                data={"payload_json": json.dumps(payload, ensure_ascii=False)},
                files=[(f"files[{index}]", (f.file_name, f.content)) for index, f in enumerate(files)],
            )
        return _decode("send_message", response, lambda body: str(body["id"]))

    # === Members ===

    async def list_members(self, guild_id: str, *, limit: int = 1000, after: str | None = None) -> list[GuildMember]:
        params: dict[str, str | int] = {"limit": limit}
        if after is not None:
            params["after"] = after
        response = await self._request("list_members", "GET", f"guilds/{guild_id}/members", params=params)
        return _decode("list_members", response, _members)

    async def add_role_to_member(self, guild_id: str, member_id: str, role_id: str) -> None:
        await self._request(
            "add_role_to_member", "PUT", f"guilds/{guild_id}/members/{member_id}/roles/{role_id}"
        )
