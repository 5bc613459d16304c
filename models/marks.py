"""
Examination view records for the Suffah school document pipeline
Roll-number slips, class results, award lists and marks certificates
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from models.base import ViewRecord
from models.errors import InvalidDocumentRequest
from models.student import StudentEntry
from utils.validators import validate_marks, validate_non_negative


@dataclass(frozen=True)
class ExamScheduleEntry(ViewRecord):
    """One paper in an exam schedule"""

    KIND = 'Exam schedule entry'
    REQUIRED = ('subject',)
    DATES = ('date',)

    subject: str
    date: Optional[date] = None
    time: Optional[str] = None


DEFAULT_SLIP_INSTRUCTIONS = (
    'Bring this slip to the examination hall for every paper.',
    'Reach the examination centre 15 minutes before the paper starts.',
    'Mobile phones and programmable calculators are not allowed.',
    'Use of unfair means will lead to cancellation of the paper.',
)


@dataclass(frozen=True)
class RollNumberSlipData(ViewRecord):
    """Examination roll-number slip for one student"""

    KIND = 'Roll number slip'
    REQUIRED = ('student_id', 'name', 'class_name', 'exam_name')
    NESTED = {'schedule': ExamScheduleEntry}
    SEQUENCES = ('instructions',)

    student_id: str
    name: str
    class_name: str
    exam_name: str
    father_name: Optional[str] = None
    section: Optional[str] = None
    roll_number: Optional[str] = None
    photo_url: Optional[str] = None
    session: Optional[str] = None
    exam_center: Optional[str] = None
    schedule: Tuple[ExamScheduleEntry, ...] = ()
    instructions: Tuple[str, ...] = DEFAULT_SLIP_INSTRUCTIONS
    school_name: Optional[str] = None
    school_address: Optional[str] = None


@dataclass(frozen=True)
class ClassRollSlipRequest(ViewRecord):
    """Roll-number slips for every student in a class"""

    KIND = 'Roll number slips'
    REQUIRED = ('class_name', 'exam_name', 'students')
    NESTED = {'students': StudentEntry, 'schedule': ExamScheduleEntry}
    SEQUENCES = ('instructions',)

    class_name: str
    exam_name: str
    students: Tuple[StudentEntry, ...]
    schedule: Tuple[ExamScheduleEntry, ...] = ()
    section: Optional[str] = None
    session: Optional[str] = None
    exam_center: Optional[str] = None
    instructions: Tuple[str, ...] = DEFAULT_SLIP_INSTRUCTIONS
    school_name: Optional[str] = None
    school_address: Optional[str] = None


@dataclass(frozen=True)
class StudentResult(ViewRecord):
    """One student's total in an examination"""

    KIND = 'Student result'
    REQUIRED = ('student_id', 'name', 'marks_obtained', 'total_marks')

    student_id: str
    name: str
    marks_obtained: float
    total_marks: float
    father_name: Optional[str] = None
    roll_number: Optional[str] = None
    grade: Optional[str] = None

    def validate(self):
        is_valid, message = validate_marks(self.marks_obtained, self.total_marks)
        if not is_valid:
            raise InvalidDocumentRequest(self.KIND, 'marks_obtained', message)


@dataclass(frozen=True)
class ClassResultsRequest(ViewRecord):
    """Result sheet for a class"""

    KIND = 'Results'
    REQUIRED = ('class_name', 'exam_name', 'results')
    NESTED = {'results': StudentResult}

    class_name: str
    exam_name: str
    results: Tuple[StudentResult, ...]
    section: Optional[str] = None
    session: Optional[str] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None


@dataclass(frozen=True)
class AwardListEntry(ViewRecord):
    """One row of a subject award list"""

    KIND = 'Award list entry'
    REQUIRED = ('student_id', 'name')

    student_id: str
    name: str
    father_name: Optional[str] = None
    roll_number: Optional[str] = None
    theory: Optional[float] = None
    practical: Optional[float] = None
    total: Optional[float] = None

    def validate(self):
        for name in ('theory', 'practical', 'total'):
            value = getattr(self, name)
            if value is not None:
                is_valid, message = validate_non_negative(value, name)
                if not is_valid:
                    raise InvalidDocumentRequest(self.KIND, name, message)

    @property
    def computed_total(self):
        """Explicit total, else theory + practical, else None"""
        if self.total is not None:
            return self.total
        if self.theory is None and self.practical is None:
            return None
        return (self.theory or 0) + (self.practical or 0)


@dataclass(frozen=True)
class AwardListData(ViewRecord):
    """Subject award list for a class"""

    KIND = 'Award list'
    REQUIRED = ('class_name', 'subject', 'entries')
    NESTED = {'entries': AwardListEntry}
    DATES = ('exam_date',)

    class_name: str
    subject: str
    entries: Tuple[AwardListEntry, ...]
    section: Optional[str] = None
    session: Optional[str] = None
    exam_name: Optional[str] = None
    teacher_name: Optional[str] = None
    max_marks: Optional[float] = None
    exam_date: Optional[date] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None


@dataclass(frozen=True)
class SubjectMark(ViewRecord):
    """Marks in one subject on a certificate"""

    KIND = 'Subject mark'
    REQUIRED = ('subject', 'total_marks', 'obtained_marks')

    subject: str
    total_marks: float
    obtained_marks: float

    def validate(self):
        is_valid, message = validate_marks(self.obtained_marks, self.total_marks)
        if not is_valid:
            raise InvalidDocumentRequest(self.KIND, 'obtained_marks', message)


@dataclass(frozen=True)
class MarksCertificateData(ViewRecord):
    """Detailed marks certificate for one student"""

    KIND = 'Marks certificate'
    REQUIRED = ('student_id', 'name', 'class_name', 'subjects')
    NESTED = {'subjects': SubjectMark}
    DATES = ('date_of_birth', 'issue_date')

    student_id: str
    name: str
    class_name: str
    subjects: Tuple[SubjectMark, ...]
    father_name: Optional[str] = None
    roll_number: Optional[str] = None
    registration_number: Optional[str] = None
    section: Optional[str] = None
    exam_name: Optional[str] = None
    session: Optional[str] = None
    date_of_birth: Optional[date] = None
    issue_date: Optional[date] = None
    photo_url: Optional[str] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None
