"""
Environment-based configuration.

Values come from the process environment; README.md lists the
variables to export before starting the bot.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    """Runtime settings for the chat bot and the MCP server."""

    client_id: str = ""
    client_secret: str = ""
    channel: str = ""
    oauth_token: str = ""
    bot_nick: str = ""
    workers: int = 4
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Build a Config from environment variables."""
        channel = os.getenv("TWITCH_CHANNEL", "").lstrip("#").lower()
        return cls(
            client_id=os.getenv("TWITCH_CLIENT_ID", ""),
            client_secret=os.getenv("TWITCH_CLIENT_SECRET", ""),
            channel=channel,
            oauth_token=os.getenv("TWITCH_OAUTH_TOKEN", ""),
            bot_nick=os.getenv("TWITCH_BOT_NICK", "") or channel,
            workers=int(os.getenv("CLIPS_BOT_WORKERS", "4")),
            log_level=os.getenv("CLIPS_BOT_LOG_LEVEL", "INFO"),
        )

    def missing(self, for_chat: bool = False) -> list[str]:
        """Validate required settings. Returns list of missing env vars."""
        missing = []
        if not self.client_id:
            missing.append("TWITCH_CLIENT_ID")
        if not self.client_secret:
            missing.append("TWITCH_CLIENT_SECRET")
        if for_chat:
            if not self.channel:
                missing.append("TWITCH_CHANNEL")
            if not self.oauth_token:
                missing.append("TWITCH_OAUTH_TOKEN")
        return missing
