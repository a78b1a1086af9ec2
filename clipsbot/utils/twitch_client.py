"""
Twitch Helix API client for the clip catalog.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx

from .logger import get_logger
from .twitch_auth import AUTH_URL, get_app_access_token

logger = get_logger("twitch_client")

HELIX_URL = "https://api.twitch.tv"


class TwitchError(Exception):
    """Base class for Twitch API failures."""


class TransportError(TwitchError):
    """A request to Twitch failed or returned an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BroadcasterNotFoundError(TwitchError):
    """No broadcaster matched the requested login names."""

    def __init__(self, names: list[str]):
        super().__init__(f"No broadcasters found for: {', '.join(names)}")
        self.names = names


@dataclass(frozen=True)
class Clip:
    """Represents a Twitch clip."""

    id: str
    url: str = ""
    embed_url: str = ""
    broadcaster_id: str = ""
    broadcaster_name: str = ""
    creator_id: str = ""
    creator_name: str = ""
    video_id: str = ""
    game_id: str = ""
    language: str = ""
    title: str = ""
    view_count: int = 0
    created_at: str = ""
    thumbnail_url: str = ""
    duration: float = 0.0

    @classmethod
    def from_api(cls, data: dict) -> "Clip":
        return cls(
            id=data.get("id", ""),
            url=data.get("url", ""),
            embed_url=data.get("embed_url", ""),
            broadcaster_id=data.get("broadcaster_id", ""),
            broadcaster_name=data.get("broadcaster_name", ""),
            creator_id=data.get("creator_id", ""),
            creator_name=data.get("creator_name", ""),
            video_id=data.get("video_id", ""),
            game_id=data.get("game_id", ""),
            language=data.get("language", ""),
            title=data.get("title", ""),
            view_count=int(data.get("view_count") or 0),
            created_at=data.get("created_at", ""),
            thumbnail_url=data.get("thumbnail_url", ""),
            duration=float(data.get("duration") or 0.0),
        )


@dataclass(frozen=True)
class ClipPage:
    """One page of clips plus the cursor for the next page ("" when exhausted)."""

    clips: tuple[Clip, ...] = ()
    cursor: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "ClipPage":
        pagination = data.get("pagination") or {}
        return cls(
            clips=tuple(Clip.from_api(c) for c in data.get("data") or []),
            cursor=pagination.get("cursor") or "",
        )


@dataclass(frozen=True)
class Broadcaster:
    """Represents a Twitch user, used for broadcasters."""

    id: str
    login: str = ""
    display_name: str = ""
    type: str = ""
    broadcaster_type: str = ""
    description: str = ""
    profile_image_url: str = ""
    offline_image_url: str = ""
    view_count: int = 0

    @classmethod
    def from_api(cls, data: dict) -> "Broadcaster":
        return cls(
            id=data.get("id", ""),
            login=data.get("login", ""),
            display_name=data.get("display_name", ""),
            type=data.get("type", ""),
            broadcaster_type=data.get("broadcaster_type", ""),
            description=data.get("description", ""),
            profile_image_url=data.get("profile_image_url", ""),
            offline_image_url=data.get("offline_image_url", ""),
            view_count=int(data.get("view_count") or 0),
        )


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as the RFC 3339 UTC string Helix expects."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class TwitchClient:
    """
    Wrapper for the Twitch Helix API.

    Construct it once, call authenticate() once, then share it between
    commands. The access token is only read after authentication, so
    concurrent lookups are safe.
    """

    client_id: str
    client_secret: str
    access_token: str = ""
    base_url: str = HELIX_URL
    auth_url: str = AUTH_URL
    http: httpx.Client = field(default_factory=httpx.Client)

    def authenticate(self) -> None:
        """Obtain an app access token via the client-credentials exchange."""
        try:
            token_data = get_app_access_token(
                self.http, self.client_id, self.client_secret, auth_url=self.auth_url
            )
        except httpx.HTTPError as e:
            logger.error(f"Token request failed: {e}")
            raise TransportError(f"Token request failed: {e}") from e
        self.access_token = token_data.get("access_token", "")
        if not self.access_token:
            raise TransportError("Token request returned no access_token")

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "TwitchClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        return {
            "Client-ID": self.client_id,
            "Authorization": f"Bearer {self.access_token}",
        }

    def _api_call(self, method: str, path: str, params=None) -> dict:
        """Make an API call and decode the JSON body. No retries."""
        url = f"{self.base_url}{path}"
        logger.debug(f"Request: {method.upper()} {url} {params}")
        try:
            resp = self.http.request(
                method.upper(), url, params=params, headers=self._headers(), timeout=10.0
            )
        except httpx.HTTPError as e:
            logger.error(f"API call to {url} failed: {e}")
            raise TransportError(f"API call to {path} failed: {e}") from e

        if resp.status_code >= 400:
            logger.warning(f"API call to {url} failed: {resp.status_code} - {resp.text[:200]}")
            raise TransportError(
                f"API call to {path} failed with status {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(f"API call to {path} returned invalid JSON") from e

    def get_broadcasters_by_name(self, names: list[str]) -> list[Broadcaster]:
        """Find broadcasters by login name. Raises BroadcasterNotFoundError if none match."""
        params = [("login", name.lower()) for name in names]
        data = self._api_call("get", "/helix/users", params=params)
        broadcasters = [Broadcaster.from_api(b) for b in data.get("data") or []]
        if not broadcasters:
            raise BroadcasterNotFoundError(names)
        return broadcasters

    def get_clips(
        self,
        broadcaster_id: str,
        after: str = "",
        before: str = "",
        started_at: datetime | None = None,
        ended_at: datetime | None = None,
        first: int = 100,
    ) -> ClipPage:
        """
        Get one page of clips for a broadcaster.

        Args:
            broadcaster_id: Channel to list clips for
            after: Cursor for the next page (empty for the first page)
            before: Cursor for the previous page
            started_at: Only clips created at or after this instant
            ended_at: Only clips created before this instant
            first: Page size (Helix caps it at 100)

        Returns:
            ClipPage with the clips and the continuation cursor
        """
        params = {"broadcaster_id": broadcaster_id, "first": str(first)}
        if started_at is not None:
            params["started_at"] = format_timestamp(started_at)
        if ended_at is not None:
            params["ended_at"] = format_timestamp(ended_at)
        if after:
            params["after"] = after
        if before:
            params["before"] = before

        data = self._api_call("get", "/helix/clips", params=params)
        return ClipPage.from_api(data)
