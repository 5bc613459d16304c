"""
View record package for the Suffah school document pipeline
"""

from .errors import DocumentError, InvalidDocumentRequest, GenerationError, PreviewNotReady
from .artifact import GeneratedArtifact, DocumentBlob
from .attendance import AttendanceRecord, StudentAttendanceRow, ClassAttendanceRequest, IndividualAttendanceRequest
from .student import StudentEntry, StudentCardData, BulkStudentCardRequest, StudentListRequest, AdmissionFormData
from .academic import TimetableEntry, ClassTimetableRequest
from .marks import (
    ExamScheduleEntry, RollNumberSlipData, ClassRollSlipRequest, StudentResult, ClassResultsRequest,
    AwardListEntry, AwardListData, SubjectMark, MarksCertificateData
)
from .fees import (
    FeeLineItem, Payment, InvoiceData, ReceiptData, FeeReportEntry, ClassFeeReportRequest,
    FeeStatementLine, IndividualFeeReportRequest
)
from .user import TeacherCardData

__all__ = [
    'DocumentError', 'InvalidDocumentRequest', 'GenerationError', 'PreviewNotReady',
    'GeneratedArtifact', 'DocumentBlob',
    'AttendanceRecord', 'StudentAttendanceRow', 'ClassAttendanceRequest', 'IndividualAttendanceRequest',
    'StudentEntry', 'StudentCardData', 'BulkStudentCardRequest', 'StudentListRequest', 'AdmissionFormData',
    'TimetableEntry', 'ClassTimetableRequest',
    'ExamScheduleEntry', 'RollNumberSlipData', 'ClassRollSlipRequest', 'StudentResult', 'ClassResultsRequest',
    'AwardListEntry', 'AwardListData', 'SubjectMark', 'MarksCertificateData',
    'FeeLineItem', 'Payment', 'InvoiceData', 'ReceiptData', 'FeeReportEntry', 'ClassFeeReportRequest',
    'FeeStatementLine', 'IndividualFeeReportRequest',
    'TeacherCardData',
]
