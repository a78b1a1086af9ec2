"""
Clip search tools.
"""

import asyncio

from mcp.server.fastmcp import Context

from ..app import mcp, get_bot
from ..bot import HELP_TEXT
from ..command import COMMAND_PREFIX


def as_command(text: str) -> str:
    """Prefix text with the command marker unless it already has it."""
    text = text.strip()
    if text.startswith(COMMAND_PREFIX):
        return text
    return f"{COMMAND_PREFIX} {text}"


@mcp.tool()
async def search_clips(command: str, ctx: Context) -> str:
    """
    Search a streamer's Twitch clips.

    Uses the same syntax as the chat command, with or without the
    leading "!clips":
        streamer
        streamer creator
        "part of the title" streamer
        top5 streamer 1m
        streamer 2024-01-01 2024-02-01

    Args:
        command: The command text

    Returns:
        The reply the chat bot would send.
    """
    bot = get_bot(ctx)
    # Catalog scans block on HTTP, keep them off the event loop
    reply = await asyncio.to_thread(bot.handle_message, as_command(command))
    return reply or HELP_TEXT


@mcp.tool()
def clips_help() -> str:
    """Explain the clip search syntax."""
    return HELP_TEXT
