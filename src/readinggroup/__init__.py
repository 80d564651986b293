"""Reading group seating and reader rotation."""

from .core import GroupReaders, GroupResult, ReaderRosters, compute_groups
from .exceptions import ReadingGroupError, ValidationError
from .models import (
    Attendance,
    Participant,
    ReadingStatus,
    RotationCursor,
    SeatingGroup,
    SeatingPolicy,
    WeeklyState,
)
from .roster import (
    build_reader_roster,
    is_attending,
    is_reader_eligible,
    sort_by_first_name,
    take_with_wrap,
    up_next,
)
from .scheduler import ReaderSelection, select_readers, split_seating

__all__ = [
    "Attendance",
    "ReadingStatus",
    "SeatingPolicy",
    "SeatingGroup",
    "Participant",
    "WeeklyState",
    "RotationCursor",
    "GroupReaders",
    "ReaderRosters",
    "GroupResult",
    "ReaderSelection",
    "ReadingGroupError",
    "ValidationError",
    "compute_groups",
    "split_seating",
    "select_readers",
    "build_reader_roster",
    "is_attending",
    "is_reader_eligible",
    "sort_by_first_name",
    "take_with_wrap",
    "up_next",
]
