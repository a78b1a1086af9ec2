"""
Match predicates comparing a candidate clip against a query.

The set of filters is closed: each ClipMatch member is one predicate,
and MatchAll combines any number of them with logical AND.
"""

from dataclasses import dataclass
from enum import Enum


class ClipMatch(Enum):
    """Case-insensitive substring checks of a query field against a clip field."""

    TITLE = "title"
    CREATOR = "creator_name"

    def __call__(self, clip, query) -> bool:
        needle = getattr(query, self.value).lower()
        return needle in getattr(clip, self.value).lower()


@dataclass(frozen=True)
class MatchAll:
    """Logical AND over an ordered sequence of predicates. Empty means always true."""

    predicates: tuple[ClipMatch, ...] = ()

    @classmethod
    def of(cls, *predicates: ClipMatch) -> "MatchAll":
        return cls(tuple(predicates))

    def __call__(self, clip, query) -> bool:
        return all(predicate(clip, query) for predicate in self.predicates)


DEFAULT_MATCH = MatchAll.of(ClipMatch.TITLE, ClipMatch.CREATOR)
