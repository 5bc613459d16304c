"""
Staff view records for the Suffah school document pipeline
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from models.base import ViewRecord


@dataclass(frozen=True)
class TeacherCardData(ViewRecord):
    """Data printed on a staff ID card"""

    KIND = 'Teacher card'
    REQUIRED = ('teacher_id', 'name')
    DATES = ('joining_date', 'issue_date', 'expiry_date')

    teacher_id: str
    name: str
    designation: Optional[str] = None
    subject: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    cnic: Optional[str] = None
    blood_group: Optional[str] = None
    photo_url: Optional[str] = None
    joining_date: Optional[date] = None
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None
