"""
Clip resolution: walk the paginated clip catalog and pick results.

Three strategies:
- find_clip: first clip in catalog order that matches
- find_most_popular_clip: matching clip with the highest view count
- find_top_clips: up to N matching clips by descending view count

The single-clip strategies return the query itself when nothing matches,
so callers check is_not_found(result, query) instead of testing for None.
"""

import heapq
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, Protocol

from .command import Command
from .utils.logger import get_logger
from .utils.twitch_client import Clip, ClipPage

logger = get_logger("resolver")

PAGE_SIZE = 100
DEFAULT_LOOKBACK = timedelta(days=7)


class ClipCatalog(Protocol):
    def get_clips(
        self,
        broadcaster_id: str,
        after: str = "",
        before: str = "",
        started_at: datetime | None = None,
        ended_at: datetime | None = None,
        first: int = PAGE_SIZE,
    ) -> ClipPage: ...


@dataclass(frozen=True)
class ClipQuery:
    """What a clip must look like to match; doubles as the "not found" sentinel."""

    broadcaster_id: str
    title: str = ""
    creator_name: str = ""
    started_at: datetime | None = None
    ended_at: datetime | None = None
    view_count: int = 0

    @classmethod
    def from_command(cls, command: Command, broadcaster_id: str) -> "ClipQuery":
        return cls(
            broadcaster_id=broadcaster_id,
            title=command.title,
            creator_name=command.creator,
            started_at=command.started_at,
            ended_at=command.ended_at,
        )

    @property
    def is_specific(self) -> bool:
        """Both title and creator given, so any match is assumed to be the one."""
        return bool(self.title and self.creator_name)


Match = Callable[[Clip, ClipQuery], bool]


def is_not_found(result, query: ClipQuery) -> bool:
    """True when a strategy handed back the query sentinel instead of a clip."""
    return result == query


class ClipResolver:
    """Scans a broadcaster's clips one page at a time."""

    def __init__(self, catalog: ClipCatalog, now: Callable[[], datetime] | None = None):
        self.catalog = catalog
        self._now = now or (lambda: datetime.now(timezone.utc))

    def with_default_window(self, query: ClipQuery) -> ClipQuery:
        """Fill in started_at as one week ago when the query has no start bound."""
        if query.started_at is not None:
            return query
        return replace(query, started_at=self._now() - DEFAULT_LOOKBACK)

    def iter_clips(self, query: ClipQuery) -> Iterator[Clip]:
        """
        Yield every clip in the query's time window, page by page.

        Queries without a start bound are scanned from one week ago. Stops
        after a page without a cursor or an empty page. Transport errors
        propagate to the caller and end the scan.
        """
        query = self.with_default_window(query)
        cursor = ""
        pages = 0
        while True:
            page = self.catalog.get_clips(
                query.broadcaster_id,
                after=cursor,
                started_at=query.started_at,
                ended_at=query.ended_at,
                first=PAGE_SIZE,
            )
            pages += 1
            yield from page.clips

            if not page.clips or not page.cursor:
                logger.debug(f"Scanned {pages} page(s) for broadcaster {query.broadcaster_id}")
                return
            cursor = page.cursor

    def find_clip(self, query: ClipQuery, match: Match) -> Clip | ClipQuery:
        """Return the first matching clip, or the query if none matches."""
        for clip in self.iter_clips(query):
            if match(clip, query):
                return clip
        return query

    def find_most_popular_clip(self, query: ClipQuery, match: Match) -> Clip | ClipQuery:
        """Return the matching clip with the most views; the first one seen wins ties."""
        most_popular = query
        for clip in self.iter_clips(query):
            if clip.view_count > most_popular.view_count and match(clip, query):
                most_popular = clip
        return most_popular

    def find_top_clips(self, query: ClipQuery, match: Match, n: int) -> list[Clip]:
        """Return up to n matching clips ordered by view count, catalog order on ties."""
        if n <= 0:
            return []
        matches = (clip for clip in self.iter_clips(query) if match(clip, query))
        return heapq.nlargest(n, matches, key=lambda clip: clip.view_count)

    def resolve(self, query: ClipQuery, match: Match) -> Clip | ClipQuery:
        """Pick a single clip: first match for specific queries, most popular otherwise."""
        if query.is_specific:
            return self.find_clip(query, match)
        # Many clips may share a creator or a title fragment
        return self.find_most_popular_clip(query, match)
