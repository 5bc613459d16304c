"""
Academic view records for the Suffah school document pipeline
Class timetable entries
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from models.base import ViewRecord
from models.errors import InvalidDocumentRequest
from utils.validators import validate_time

TIMETABLE_DAYS = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')


@dataclass(frozen=True)
class TimetableEntry(ViewRecord):
    """One period in the weekly timetable"""

    KIND = 'Timetable entry'
    REQUIRED = ('day', 'start_time', 'end_time', 'subject')

    day: str
    start_time: str
    end_time: str
    subject: str
    teacher: Optional[str] = None
    room: Optional[str] = None

    def validate(self):
        day = str(self.day).strip().capitalize()
        if day not in TIMETABLE_DAYS:
            raise InvalidDocumentRequest(
                self.KIND, 'day', f"field 'day' must be one of: {', '.join(TIMETABLE_DAYS)}"
            )
        object.__setattr__(self, 'day', day)
        for name in ('start_time', 'end_time'):
            value = str(getattr(self, name)).strip()
            is_valid, message = validate_time(value)
            if not is_valid:
                raise InvalidDocumentRequest(self.KIND, name, f"field '{name}': {message}")
            # Zero-pad so '8:00' and '08:00' land in the same slot
            hours, minutes = value[:5].split(':')
            object.__setattr__(self, name, f'{int(hours):02d}:{int(minutes):02d}')


@dataclass(frozen=True)
class ClassTimetableRequest(ViewRecord):
    """Weekly timetable for a class"""

    KIND = 'Timetable'
    REQUIRED = ('class_name', 'entries')
    NESTED = {'entries': TimetableEntry}

    class_name: str
    entries: Tuple[TimetableEntry, ...]
    section: Optional[str] = None
    session: Optional[str] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None
