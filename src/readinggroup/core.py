"""Core functionality for the reading group manager.

The module ties the pieces together into a single pure operation,
:func:`compute_groups`:

* Attendees are split into the "table" and "lounge" seating groups. Seating
  is random.
* Each group gets its scheduled and bonus readers from the deterministic
  alphabetical rotation, plus the person to ask next.
* The rotation cursor for the following cycle is returned, never stored.
  Persisting it is up to the caller, once the cycle is actually advanced.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from .models import RotationCursor, SeatingGroup, SeatingPolicy, WeeklyState
from .roster import build_reader_roster, is_attending, take_with_wrap, up_next
from .scheduler import (
    BONUS_QUOTA,
    SCHEDULED_QUOTA,
    SINGLE_GROUP_LIMIT,
    select_readers,
    split_seating,
)

NO_ATTENDEES_ERROR = "No attendees for this week."


@dataclass(slots=True, frozen=True)
class GroupReaders:
    scheduled: Tuple[WeeklyState, ...] = ()
    bonus: Tuple[WeeklyState, ...] = ()

    def as_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "scheduled": [s.as_dict() for s in self.scheduled],
            "bonus": [s.as_dict() for s in self.bonus],
        }


@dataclass(slots=True, frozen=True)
class ReaderRosters:
    """Full ordered reader lists that callers can window however they like."""

    table: Tuple[WeeklyState, ...] = ()
    lounge: Tuple[WeeklyState, ...] = ()
    start_index: RotationCursor = field(default_factory=RotationCursor)

    def roster(self, group: SeatingGroup) -> Tuple[WeeklyState, ...]:
        return self.table if group is SeatingGroup.table else self.lounge

    def window(self, group: SeatingGroup, count: int, week_offset: int = 0) -> List[WeeklyState]:
        """Return ``count`` readers for the week ``week_offset`` weeks ahead."""

        start = self.start_index.for_group(group) + week_offset * count
        return take_with_wrap(self.roster(group), start, count)

    def as_dict(self) -> dict[str, Any]:
        return {
            "table": [s.as_dict() for s in self.table],
            "lounge": [s.as_dict() for s in self.lounge],
            "start_index": self.start_index.as_dict(),
        }


@dataclass(slots=True, frozen=True)
class GroupResult:
    """Seating, readers and the rotation cursor to persist for next cycle."""

    table: Tuple[WeeklyState, ...] = ()
    lounge: Tuple[WeeklyState, ...] = ()
    readers: Dict[SeatingGroup, GroupReaders] = field(
        default_factory=lambda: {group: GroupReaders() for group in SeatingGroup}
    )
    up_next: Dict[SeatingGroup, WeeklyState | None] = field(
        default_factory=lambda: {group: None for group in SeatingGroup}
    )
    rosters: ReaderRosters = field(default_factory=ReaderRosters)
    next_cursor: RotationCursor = field(default_factory=RotationCursor)
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return a serialisable representation for the HTTP layer."""

        return {
            "table": [s.as_dict() for s in self.table],
            "lounge": [s.as_dict() for s in self.lounge],
            "readers": {group.value: self.readers[group].as_dict() for group in SeatingGroup},
            "up_next": {
                group.value: (state.as_dict() if state else None)
                for group, state in self.up_next.items()
            },
            "rosters": self.rosters.as_dict(),
            "next_cursor": self.next_cursor.as_dict(),
            "error": self.error,
        }


def compute_groups(
    participants: Iterable[WeeklyState],
    cursor: RotationCursor | None = None,
    *,
    rng: random.Random | None = None,
    policy: SeatingPolicy = SeatingPolicy.strict,
    scheduled_quota: int = SCHEDULED_QUOTA,
    bonus_quota: int = BONUS_QUOTA,
    single_group_limit: int = SINGLE_GROUP_LIMIT,
) -> GroupResult:
    """Seat the attendees and pick this cycle's readers.

    Parameters
    ----------
    participants:
        Every weekly state held for the cycle. Filtering happens here.
    cursor:
        Stored rotation offsets, ``RotationCursor()`` when nothing was saved yet.
    rng:
        Random source for the seating shuffle. Pass a seeded
        :class:`random.Random` for reproducible seating.
    """

    cursor = cursor or RotationCursor()
    rng = rng or random.Random()
    seated = [p for p in participants if is_attending(p, policy)]

    if not seated:
        return GroupResult(
            rosters=ReaderRosters(start_index=cursor),
            next_cursor=cursor,
            error=NO_ATTENDEES_ERROR,
        )

    table, lounge = split_seating(seated, rng, single_group_limit=single_group_limit)
    members = {SeatingGroup.table: table, SeatingGroup.lounge: lounge}

    readers: Dict[SeatingGroup, GroupReaders] = {}
    next_up: Dict[SeatingGroup, WeeklyState | None] = {}
    next_cursor = cursor
    for group, group_members in members.items():
        if not group_members:
            # unused group keeps its place in the rotation
            readers[group] = GroupReaders()
            next_up[group] = None
            continue
        selection = select_readers(
            group_members,
            cursor.for_group(group),
            scheduled_quota=scheduled_quota,
            bonus_quota=bonus_quota,
            policy=policy,
        )
        readers[group] = GroupReaders(scheduled=selection.scheduled, bonus=selection.bonus)
        next_up[group] = up_next(group_members, policy)
        next_cursor = next_cursor.with_group(group, selection.next_start_index)

    rosters = ReaderRosters(
        table=tuple(build_reader_roster(table, policy)),
        lounge=tuple(build_reader_roster(lounge, policy)),
        start_index=cursor,
    )
    return GroupResult(
        table=tuple(table),
        lounge=tuple(lounge),
        readers=readers,
        up_next=next_up,
        rosters=rosters,
        next_cursor=next_cursor,
    )
