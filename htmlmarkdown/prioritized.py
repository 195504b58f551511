"""Values tagged with a priority, run in ascending priority order."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from operator import attrgetter
from typing import Generic, TypeVar

PRIORITY_EARLY = 100
"""Run early in the process; subtract from this to run even earlier."""

PRIORITY_STANDARD = 500
"""For handlers that do not need to run in a particular order."""

PRIORITY_LATE = 1000
"""Run late in the process; add to this to run even later."""

V = TypeVar("V")


@dataclass(frozen=True)
class Prioritized(Generic[V]):
    """A value together with the priority it should be processed at."""

    value: V
    priority: int


def sort_prioritized(values: Iterable[Prioritized[V]]) -> list[Prioritized[V]]:
    """Return the values ordered by ascending priority."""
    return sorted(values, key=attrgetter("priority"))