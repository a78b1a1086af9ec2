"""
!clips command handling: parse, look up the broadcaster, resolve, reply.
"""

from datetime import datetime, timezone
from typing import Callable

from .command import (
    COMMAND_PREFIX,
    Command,
    DateParseError,
    MissingBroadcasterError,
    NotACommandError,
    parse_command,
)
from .matching import DEFAULT_MATCH
from .resolver import ClipQuery, ClipResolver, is_not_found
from .utils.logger import get_logger
from .utils.twitch_client import BroadcasterNotFoundError, TransportError, TwitchClient

logger = get_logger("bot")

HELP_TEXT = f"""Search for Twitch clips.
Usage: {COMMAND_PREFIX} subcommand streamer "title" creator start_date end_date
Required arguments:
    - streamer: The name of the Twitch channel/streamer where to look for clips.
Optional arguments:
    - subcommand: "topN" returns the top N clips by view count for the given streamer, filtering by any other optional argument passed. "help" prints this message.
    - title: Find a clip with a specific title. Must be enclosed in quotes.
    - creator: Filter by clips created by a specific user. If defined, must always come after the streamer argument.
    - start_date: Look for a clip created from this date onwards. Defaults to 1 week ago. Format as YYYY-MM-DD, or use 7d, 1m, 2y for days, months or years ago.
    - end_date: Look for a clip created before this date. Format as YYYY-MM-DD."""

MISSING_BROADCASTER_REPLY = f"I need at least the name of a streamer to look for clips! Use \"{COMMAND_PREFIX} help\" for more info."
STREAMER_NOT_FOUND_REPLY = "Couldn't find a streamer named \"{name}\". Could you check the name and try again?"
NO_MATCH_REPLY = "I couldn't find a clip that matches your search."
NO_TOP_CLIPS_REPLY = "Couldn't find any \"{name}\" clips. Check the streamer name and the date bounds."
INVALID_DATE_REPLY = "That date doesn't exist. Dates must be valid and formatted as YYYY-MM-DD."
GENERIC_FAILURE_REPLY = "Something went wrong while talking to Twitch. Please try again later."
FOUND_REPLY = "Found your clip: {url}"

DATE_FORMAT = "%Y-%m-%d"


class ClipsBot:
    """
    Turns !clips messages into reply text.

    Holds no per-message state, so one instance can serve concurrent
    messages as long as the Twitch client is already authenticated.
    """

    def __init__(self, twitch: TwitchClient, now: Callable[[], datetime] | None = None):
        self.twitch = twitch
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.resolver = ClipResolver(twitch, now=self._now)

    def handle_message(self, text: str) -> str | None:
        """
        Handle one chat message.

        Returns:
            The reply to send, or None if the message is not a command.
        """
        try:
            command = parse_command(text.strip(), now=self._now())
        except NotACommandError:
            return None
        except DateParseError as e:
            logger.info(f"Rejected command with bad date: {e}")
            return INVALID_DATE_REPLY

        logger.debug(f"Command: {command}")

        if command.is_help:
            return HELP_TEXT

        try:
            command.validate()
        except MissingBroadcasterError:
            return MISSING_BROADCASTER_REPLY

        try:
            broadcaster = self.twitch.get_broadcasters_by_name([command.broadcaster])[0]
            query = ClipQuery.from_command(command, broadcaster.id)
            if command.is_lookup:
                return self._find_clip(query)
            return self._top_clips(command, query)
        except BroadcasterNotFoundError:
            return STREAMER_NOT_FOUND_REPLY.format(name=command.broadcaster)
        except TransportError as e:
            logger.error(f"Clip search failed for {command.broadcaster}: {e}")
            return GENERIC_FAILURE_REPLY

    def _find_clip(self, query: ClipQuery) -> str:
        result = self.resolver.resolve(query, DEFAULT_MATCH)
        if is_not_found(result, query):
            return NO_MATCH_REPLY
        return FOUND_REPLY.format(url=result.url)

    def _top_clips(self, command: Command, query: ClipQuery) -> str:
        results = self.resolver.find_top_clips(query, DEFAULT_MATCH, command.top)
        if not results:
            return NO_TOP_CLIPS_REPLY.format(name=command.broadcaster)

        window = self.resolver.with_default_window(query)
        started = window.started_at.strftime(DATE_FORMAT)
        ended = (window.ended_at or self._now()).strftime(DATE_FORMAT)

        lines = [f"Top {len(results)} {command.broadcaster} clips from {started} to {ended}"]
        for rank, clip in enumerate(results, start=1):
            lines.append(f"{rank}. \"{clip.title}\" by {clip.creator_name}. Views: {clip.view_count}")
        return "\n".join(lines)
