"""
Parser for the !clips chat command.

Grammar:
    !clips [<date>|<date> <date>|<N><d|m|y>] ["<title>"] [<sub>] [<broadcaster> [<creator>]]
    <sub>  ::= "help" | "top"[<N>]
    <date> ::= YYYY-MM-DD

Dates may appear anywhere; they are stripped first, then the quoted
title, and whatever words are left are read positionally.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from .dates import DateParseError, resolve_dates
from .utils.logger import get_logger

logger = get_logger("command")

COMMAND_PREFIX = "!clips"

# "strict": the message must start with COMMAND_PREFIX.
# "contains": the prefix may appear anywhere in the message.
PREFIX_POLICY = "strict"

HELP = "help"
TOP = "top"
DEFAULT_TOP = 10

QUOTE_PATTERN = re.compile(r"[\"']")

__all__ = [
    "COMMAND_PREFIX",
    "Command",
    "CommandError",
    "DateParseError",
    "MissingBroadcasterError",
    "NotACommandError",
    "is_command",
    "parse_command",
]


class CommandError(ValueError):
    """Base class for command interpretation failures."""


class NotACommandError(CommandError):
    """The message is not a !clips command."""


class MissingBroadcasterError(CommandError):
    """A lookup was requested without a broadcaster name."""


@dataclass(frozen=True)
class Command:
    """The parsed intent of one !clips message."""

    broadcaster: str = ""
    creator: str = ""
    title: str = ""
    started_at: datetime | None = None
    ended_at: datetime | None = None
    sub_command: str = ""
    top: int = 0

    @property
    def is_help(self) -> bool:
        return self.sub_command == HELP

    @property
    def is_top(self) -> bool:
        return self.sub_command == TOP

    @property
    def is_lookup(self) -> bool:
        return self.sub_command == ""

    def validate(self) -> None:
        """Raise MissingBroadcasterError if this command cannot be resolved."""
        if not self.is_help and not self.broadcaster:
            raise MissingBroadcasterError("A broadcaster name is required")


def is_command(text: str) -> bool:
    """Check whether text carries the command prefix under PREFIX_POLICY."""
    if PREFIX_POLICY == "contains":
        return COMMAND_PREFIX in text
    return text.startswith(COMMAND_PREFIX)


def _remove_once(target: str, to_remove) -> str:
    """Remove the first occurrence of each substring, in order."""
    for remove in to_remove:
        target = target.replace(remove, "", 1)
    return target


def _extract_title(text: str) -> tuple[str, str]:
    """
    Pull the first quoted segment out of text.

    Returns (title, remaining text). A title closes at the next quote of
    the same kind that opened it, so "Ninja's clutch" keeps its
    apostrophe. Quote characters without a partner are skipped; if none
    has one, the first quote runs to the end of the text.
    """
    quotes = [m.start() for m in QUOTE_PATTERN.finditer(text)]
    if not quotes:
        return "", text

    start, end = quotes[0], len(text)
    for i in quotes:
        closing = text.find(text[i], i + 1)
        if closing != -1:
            start, end = i, closing
            break

    title = text[start + 1:end]
    if not title:
        return "", text

    return title, text[:start] + " " + text[end + 1:]


def _parse_top(word: str) -> int:
    suffix = word[len(TOP):]
    if not suffix:
        logger.debug(f"No count after '{TOP}', using default of {DEFAULT_TOP}")
        return DEFAULT_TOP
    if suffix.isascii() and suffix.isdigit():
        return int(suffix)
    logger.warning(f"Non-numeric count '{suffix}' after '{TOP}', falling back to {DEFAULT_TOP}")
    return DEFAULT_TOP


def parse_command(text: str, now: datetime | None = None) -> Command:
    """
    Parse a chat message into a Command.

    Missing fields are left empty rather than rejected; call
    Command.validate() before resolving.

    Args:
        text: Raw chat message
        now: Reference time for relative dates (defaults to the current time)

    Raises:
        NotACommandError: if the message lacks the command prefix
        DateParseError: if a YYYY-MM-DD date is not a real calendar date
    """
    if not is_command(text):
        raise NotACommandError(f"Message must start with \"{COMMAND_PREFIX}\"")

    args = _remove_once(text, [COMMAND_PREFIX])

    dates = resolve_dates(args, now=now)
    args = _remove_once(args, dates.matched)

    title, args = _extract_title(args)

    words = args.split()
    logger.debug(f"Parsing args: {words}")

    sub_command = ""
    top = 0
    if words:
        if words[0] == HELP:
            sub_command = HELP
            words = words[1:]
        elif words[0].startswith(TOP):
            sub_command = TOP
            top = _parse_top(words[0])
            words = words[1:]

    broadcaster = words[0] if len(words) >= 1 else ""
    creator = words[1] if len(words) >= 2 else ""

    return Command(
        broadcaster=broadcaster,
        creator=creator,
        title=title,
        started_at=dates.started_at,
        ended_at=dates.ended_at,
        sub_command=sub_command,
        top=top,
    )
