"""
Student view records for the Suffah school document pipeline
ID cards, class lists and admission forms
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from models.base import ViewRecord


@dataclass(frozen=True)
class StudentEntry(ViewRecord):
    """A student as listed in class-wide documents"""

    KIND = 'Student'
    REQUIRED = ('student_id', 'name')

    student_id: str
    name: str
    father_name: Optional[str] = None
    roll_number: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class StudentCardData(ViewRecord):
    """Data printed on a student ID card"""

    KIND = 'Student card'
    REQUIRED = ('student_id', 'name', 'class_name')
    DATES = ('date_of_birth', 'issue_date', 'expiry_date')

    student_id: str
    name: str
    class_name: str
    father_name: Optional[str] = None
    section: Optional[str] = None
    roll_number: Optional[str] = None
    photo_url: Optional[str] = None
    date_of_birth: Optional[date] = None
    blood_group: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None


@dataclass(frozen=True)
class BulkStudentCardRequest(ViewRecord):
    """ID cards for a whole class"""

    KIND = 'Student cards'
    REQUIRED = ('class_name', 'students')
    NESTED = {'students': StudentCardData}

    class_name: str
    students: Tuple[StudentCardData, ...]
    section: Optional[str] = None


@dataclass(frozen=True)
class StudentListRequest(ViewRecord):
    """Printable class list"""

    KIND = 'Student list'
    REQUIRED = ('class_name', 'students')
    NESTED = {'students': StudentEntry}

    class_name: str
    students: Tuple[StudentEntry, ...]
    section: Optional[str] = None
    session: Optional[str] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None


@dataclass(frozen=True)
class AdmissionFormData(ViewRecord):
    """Filled admission form for one student"""

    KIND = 'Admission form'
    REQUIRED = ('student_id', 'name', 'class_name')
    DATES = ('date_of_birth', 'admission_date')

    student_id: str
    name: str
    class_name: str
    section: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    b_form_number: Optional[str] = None
    religion: Optional[str] = None
    blood_group: Optional[str] = None
    photo_url: Optional[str] = None
    father_name: Optional[str] = None
    father_cnic: Optional[str] = None
    father_occupation: Optional[str] = None
    father_phone: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_relation: Optional[str] = None
    guardian_phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    previous_school: Optional[str] = None
    previous_class: Optional[str] = None
    admission_date: Optional[date] = None
    login_email: Optional[str] = None
    login_password: Optional[str] = None
    documents: Tuple[str, ...] = (
        'Birth Certificate / B-Form',
        "Father's CNIC Copy",
        'Previous School Leaving Certificate',
        'Passport Size Photographs (4)',
    )
    school_name: Optional[str] = None
    school_address: Optional[str] = None

    SEQUENCES = ('documents',)
