"""
Attendance view records for the Suffah school document pipeline
AttendanceRecord, StudentAttendanceRow and the two attendance document requests
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from models.base import ViewRecord
from models.errors import InvalidDocumentRequest
from utils.validators import validate_date


def coerce_month(value):
    """Accept a date, 'YYYY-MM' or 'YYYY-MM-DD' and return the first day of that month"""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.replace(day=1)
    text = str(value).strip()
    if len(text) == 7:
        text = text + '-01'
    is_valid, message = validate_date(text)
    if not is_valid:
        raise ValueError(message)
    return datetime.strptime(text[:10], '%Y-%m-%d').date().replace(day=1)


@dataclass(frozen=True)
class AttendanceRecord(ViewRecord):
    """One marked day for one student"""

    KIND = 'Attendance record'
    REQUIRED = ('date', 'status')
    DATES = ('date',)

    date: date
    status: str

    def validate(self):
        # Statuses arrive as 'Present', 'ABSENT', ...; compare lower-case everywhere
        object.__setattr__(self, 'status', str(self.status).strip().lower())


def _check_unique_dates(kind, field, records):
    seen = set()
    for record in records:
        if record.date in seen:
            raise InvalidDocumentRequest(
                kind, field, f"field '{field}' has more than one record for {record.date.isoformat()}"
            )
        seen.add(record.date)


@dataclass(frozen=True)
class StudentAttendanceRow(ViewRecord):
    """A student's attendance for one month, as shown in a register row"""

    KIND = 'Attendance row'
    REQUIRED = ('student_id', 'name')
    NESTED = {'attendance': AttendanceRecord}

    student_id: str
    name: str
    father_name: Optional[str] = None
    roll_number: Optional[str] = None
    attendance: Tuple[AttendanceRecord, ...] = ()

    def validate(self):
        _check_unique_dates(self.KIND, 'attendance', self.attendance)


@dataclass(frozen=True)
class ClassAttendanceRequest(ViewRecord):
    """Monthly attendance register for a class"""

    KIND = 'Attendance'
    REQUIRED = ('class_name', 'month', 'students')
    NESTED = {'students': StudentAttendanceRow}

    class_name: str
    month: date
    students: Tuple[StudentAttendanceRow, ...]
    section: Optional[str] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None

    def validate(self):
        try:
            object.__setattr__(self, 'month', coerce_month(self.month))
        except ValueError as e:
            raise InvalidDocumentRequest(self.KIND, 'month', f"field 'month': {e}") from e


@dataclass(frozen=True)
class IndividualAttendanceRequest(ViewRecord):
    """One student's attendance report for a month"""

    KIND = 'Attendance'
    REQUIRED = ('student_id', 'name', 'class_name', 'month', 'attendance')
    NESTED = {'attendance': AttendanceRecord}

    student_id: str
    name: str
    class_name: str
    month: date
    attendance: Tuple[AttendanceRecord, ...]
    father_name: Optional[str] = None
    roll_number: Optional[str] = None
    section: Optional[str] = None
    photo_url: Optional[str] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None

    def validate(self):
        try:
            object.__setattr__(self, 'month', coerce_month(self.month))
        except ValueError as e:
            raise InvalidDocumentRequest(self.KIND, 'month', f"field 'month': {e}") from e
        _check_unique_dates(self.KIND, 'attendance', self.attendance)
