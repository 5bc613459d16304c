"""
Document service for the Suffah school document pipeline
Single entry point: generate, save immediately, or open a preview for any document request
"""

import logging

from models.academic import ClassTimetableRequest
from models.attendance import ClassAttendanceRequest, IndividualAttendanceRequest
from models.errors import InvalidDocumentRequest
from models.fees import ClassFeeReportRequest, IndividualFeeReportRequest, InvoiceData, ReceiptData
from models.marks import (
    AwardListData, ClassResultsRequest, ClassRollSlipRequest, MarksCertificateData, RollNumberSlipData
)
from models.student import AdmissionFormData, BulkStudentCardRequest, StudentCardData, StudentListRequest
from models.user import TeacherCardData
from services.attendance_report_service import AttendanceReportService
from services.exam_document_service import ExamDocumentService
from services.fee_document_service import FeeDocumentService
from services.id_card_service import IdCardService
from services.pdf_layout import build_filename, class_label
from services.preview_service import DocumentPreviewController
from services.student_document_service import StudentDocumentService

logger = logging.getLogger(__name__)


def _month(request):
    return request.month.strftime('%B %Y')


# request type -> (generator, suggested filename)
GENERATORS = {
    ClassAttendanceRequest: (
        AttendanceReportService.generate_class_register,
        lambda r: build_filename('Attendance', class_label(r.class_name, r.section), _month(r)),
    ),
    IndividualAttendanceRequest: (
        AttendanceReportService.generate_individual_report,
        lambda r: build_filename('Attendance', r.name, _month(r)),
    ),
    StudentCardData: (
        IdCardService.generate_student_card,
        lambda r: build_filename('StudentCard', r.name, r.student_id),
    ),
    BulkStudentCardRequest: (
        IdCardService.generate_bulk_student_cards,
        lambda r: build_filename('StudentCards', r.class_name, r.section or 'All'),
    ),
    TeacherCardData: (
        IdCardService.generate_teacher_card,
        lambda r: build_filename('TeacherCard', r.name, r.teacher_id),
    ),
    StudentListRequest: (
        StudentDocumentService.generate_student_list,
        lambda r: build_filename('StudentList', r.class_name, r.section or 'All'),
    ),
    ClassTimetableRequest: (
        StudentDocumentService.generate_class_timetable,
        lambda r: build_filename('Timetable', r.class_name, r.section or 'All'),
    ),
    AdmissionFormData: (
        StudentDocumentService.generate_admission_form,
        lambda r: build_filename('AdmissionForm', r.name, r.student_id),
    ),
    RollNumberSlipData: (
        ExamDocumentService.generate_roll_number_slip,
        lambda r: build_filename('RollNumberSlip', r.name, r.student_id),
    ),
    ClassRollSlipRequest: (
        ExamDocumentService.generate_class_roll_number_slips,
        lambda r: build_filename('RollNumberSlips', r.class_name, r.exam_name),
    ),
    ClassResultsRequest: (
        ExamDocumentService.generate_class_results,
        lambda r: build_filename('Results', r.class_name, r.exam_name),
    ),
    AwardListData: (
        ExamDocumentService.generate_award_list,
        lambda r: build_filename('AwardList', r.class_name, r.subject),
    ),
    MarksCertificateData: (
        ExamDocumentService.generate_marks_certificate,
        lambda r: build_filename('MarksCertificate', r.name, r.student_id),
    ),
    InvoiceData: (
        FeeDocumentService.generate_invoice,
        lambda r: build_filename('Invoice', r.student_name, r.invoice_number),
    ),
    ReceiptData: (
        FeeDocumentService.generate_receipt,
        lambda r: build_filename('Receipt', r.student_name, r.receipt_number),
    ),
    ClassFeeReportRequest: (
        FeeDocumentService.generate_class_fee_report,
        lambda r: build_filename('FeeReport', r.class_name, r.period or r.section or 'All'),
    ),
    IndividualFeeReportRequest: (
        FeeDocumentService.generate_individual_fee_report,
        lambda r: build_filename('FeeReport', r.name, r.period or r.student_id),
    ),
}


class DocumentService:
    """Dispatch document requests to their generators"""

    @staticmethod
    def _lookup(request):
        entry = GENERATORS.get(type(request))
        if entry is None:
            raise InvalidDocumentRequest('Document', 'request',
                                         f'unsupported document request {type(request).__name__}')
        return entry

    @staticmethod
    def suggested_filename(request):
        return DocumentService._lookup(request)[1](request)

    @staticmethod
    async def generate(request, assets=None, generated_on=None):
        """Generate the document for any supported request"""
        generator, _ = DocumentService._lookup(request)
        logger.debug("Generating %s via %s", type(request).__name__, generator.__qualname__)
        return await generator(request, assets=assets, generated_on=generated_on)

    @staticmethod
    async def save(request, directory, assets=None, generated_on=None):
        """Generate and write straight to disk; returns the written path"""
        artifact = await DocumentService.generate(request, assets, generated_on)
        return artifact.save(directory)

    @staticmethod
    def preview(request, assets=None, generated_on=None, resource_factory=None):
        """Preview controller bound to this request; nothing is generated until open()"""
        generator, filename_for = DocumentService._lookup(request)

        async def generate():
            return await generator(request, assets=assets, generated_on=generated_on)

        filename = filename_for(request)
        return DocumentPreviewController(generate, filename, title=filename[:-len('.pdf')],
                                         resource_factory=resource_factory)
