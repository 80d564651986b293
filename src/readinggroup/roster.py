"""Roster predicates, the canonical reading order and circular windows."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple, TypeVar

from .models import Attendance, ReadingStatus, SeatingPolicy, WeeklyState

T = TypeVar("T")


def is_attending(state: WeeklyState, policy: SeatingPolicy = SeatingPolicy.strict) -> bool:
    """Return ``True`` when the person takes a seat this cycle.

    ``strict`` seats only an explicit ``yes``; ``permissive`` seats everyone
    who has not said ``no``.
    """

    if policy is SeatingPolicy.permissive:
        return state.attendance is not Attendance.no
    return state.attendance is Attendance.yes


def is_reader_eligible(state: WeeklyState, policy: SeatingPolicy = SeatingPolicy.strict) -> bool:
    """Seated and not deferred. Pending and confirmed readers stay eligible."""

    return is_attending(state, policy) and state.reading is not ReadingStatus.deferred


def _first_name(name: str) -> str:
    parts = (name or "").split()
    return parts[0] if parts else ""


def reading_order_key(state: WeeklyState) -> Tuple[str, str, int]:
    return (_first_name(state.name).lower(), (state.name or "").lower(), state.id)


def sort_by_first_name(states: Iterable[WeeklyState]) -> List[WeeklyState]:
    """Return ``states`` in rotation order: first name, full name, then id."""

    return sorted(states, key=reading_order_key)


def take_with_wrap(items: Sequence[T], start: int, count: int) -> List[T]:
    """Return up to ``count`` items starting at ``start``, wrapping around.

    The start is reduced modulo the length so stale or negative offsets are
    accepted. No item is returned twice, whatever ``count`` is.
    """

    n = len(items)
    if n == 0 or count <= 0:
        return []
    begin = start % n
    return [items[(begin + offset) % n] for offset in range(min(count, n))]


def build_reader_roster(
    members: Iterable[WeeklyState], policy: SeatingPolicy = SeatingPolicy.strict
) -> List[WeeklyState]:
    """Eligible readers of a group in rotation order."""

    return sort_by_first_name(m for m in members if is_reader_eligible(m, policy))


def up_next(
    members: Iterable[WeeklyState], policy: SeatingPolicy = SeatingPolicy.strict
) -> WeeklyState | None:
    """Return the person the group should ask next, if any.

    Someone already marked ``pending`` is being asked and wins. Otherwise the
    first eligible person who has not confirmed yet.
    """

    attending = sort_by_first_name(m for m in members if is_attending(m, policy))
    for state in attending:
        if state.reading is ReadingStatus.pending:
            return state
    for state in attending:
        if is_reader_eligible(state, policy) and state.reading is not ReadingStatus.confirmed:
            return state
    return None
