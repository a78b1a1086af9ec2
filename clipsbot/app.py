"""
Shared application wiring: configuration, client construction, MCP server.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from mcp.server.fastmcp import Context, FastMCP

from .bot import ClipsBot
from .config import Config
from .utils.logger import get_logger, set_level
from .utils.twitch_client import TwitchClient

logger = get_logger("app")


def create_twitch_client(config: Config) -> TwitchClient:
    """Build the Helix client and provision its app access token once."""
    client = TwitchClient(
        client_id=config.client_id,
        client_secret=config.client_secret,
        http=httpx.Client(timeout=10.0),
    )
    client.authenticate()
    logger.info("Twitch client authenticated")
    return client


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[ClipsBot]:
    """Create the bot when the MCP server starts and close its client on shutdown."""
    config = Config.from_env()
    set_level(config.log_level)

    missing = config.missing()
    if missing:
        raise RuntimeError(f"Missing env vars (see the README's export block): {', '.join(missing)}")

    twitch = create_twitch_client(config)
    try:
        yield ClipsBot(twitch)
    finally:
        twitch.close()


# Initialize FastMCP server
mcp = FastMCP(name="clips-bot", lifespan=lifespan)


def get_bot(ctx: Context) -> ClipsBot:
    """The ClipsBot created by the server lifespan."""
    return ctx.request_context.lifespan_context
