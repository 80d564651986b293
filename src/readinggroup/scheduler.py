"""Seating split and per-group reader rotation."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .models import ReadingStatus, SeatingPolicy, WeeklyState
from .roster import build_reader_roster, take_with_wrap

SCHEDULED_QUOTA = 4
BONUS_QUOTA = 2
SINGLE_GROUP_LIMIT = 8


def split_seating(
    attendees: Sequence[WeeklyState],
    rng: random.Random,
    *,
    single_group_limit: int = SINGLE_GROUP_LIMIT,
) -> Tuple[List[WeeklyState], List[WeeklyState]]:
    """Return ``(table, lounge)`` for the attendees of a cycle.

    Small groups sit together at the table. Larger ones are shuffled and dealt
    alternately, the lounge taking the extra person on odd counts.
    """

    shuffled = list(attendees)
    rng.shuffle(shuffled)
    if len(shuffled) <= single_group_limit:
        return shuffled, []

    table: List[WeeklyState] = []
    lounge: List[WeeklyState] = []
    for state in shuffled:
        if len(lounge) <= len(table):
            lounge.append(state)
        else:
            table.append(state)
    return table, lounge


@dataclass(slots=True, frozen=True)
class ReaderSelection:
    """Readers picked for one group and the offset to persist for next time."""

    scheduled: Tuple[WeeklyState, ...] = ()
    bonus: Tuple[WeeklyState, ...] = ()
    next_start_index: int = 0


def select_readers(
    members: Sequence[WeeklyState],
    start_index: int,
    *,
    scheduled_quota: int = SCHEDULED_QUOTA,
    bonus_quota: int = BONUS_QUOTA,
    policy: SeatingPolicy = SeatingPolicy.strict,
) -> ReaderSelection:
    """Pick scheduled and bonus readers for a seating group.

    Confirmed readers fill the scheduled slots first, in rotation order, and
    anything beyond the quota is dropped. The remaining slots rotate through
    everyone else starting at ``start_index``; the same circular walk then
    fills the bonus slots. Only people drawn from the rotation into the
    scheduled list move the cursor.
    """

    eligible = build_reader_roster(members, policy)
    if not eligible:
        return ReaderSelection()

    confirmed = [s for s in eligible if s.reading is ReadingStatus.confirmed]
    rotating = [s for s in eligible if s.reading is not ReadingStatus.confirmed]

    scheduled: List[WeeklyState] = confirmed[:scheduled_quota]
    bonus: List[WeeklyState] = []
    picked = {s.id for s in scheduled}
    position = {s.id: index for index, s in enumerate(rotating)}
    last_rotated: int | None = None

    for state in take_with_wrap(rotating, start_index, len(rotating)):
        if state.id in picked:
            continue
        if len(scheduled) < scheduled_quota:
            scheduled.append(state)
            last_rotated = position[state.id]
        elif len(bonus) < bonus_quota:
            bonus.append(state)
        else:
            break
        picked.add(state.id)

    if last_rotated is None:
        next_start_index = start_index
    else:
        next_start_index = (last_rotated + 1) % len(rotating)

    return ReaderSelection(
        scheduled=tuple(scheduled),
        bonus=tuple(bonus),
        next_start_index=next_start_index,
    )
