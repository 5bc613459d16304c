"""
Unit tests for view records
"""

import os
import tempfile
import unittest
from datetime import date

from models import (
    AttendanceRecord, AwardListEntry, ClassAttendanceRequest, ClassFeeReportRequest, ClassTimetableRequest,
    FeeReportEntry, GeneratedArtifact, IndividualAttendanceRequest, InvalidDocumentRequest, InvoiceData,
    MarksCertificateData, StudentCardData, StudentResult, TimetableEntry
)
from models.attendance import coerce_month
from models.fees import derive_fee_status
from fakes import class_attendance_dict


class TestViewRecords(unittest.TestCase):

    def test_from_dict_builds_nested_records(self):
        """Nested dicts become records and sequences become tuples"""
        request = ClassAttendanceRequest.from_dict(class_attendance_dict(students=2))
        self.assertEqual(request.month, date(2024, 3, 1))
        self.assertEqual(len(request.students), 2)
        self.assertIsInstance(request.students, tuple)
        self.assertIsInstance(request.students[0].attendance[0], AttendanceRecord)
        self.assertEqual(request.students[0].attendance[0].date, date(2024, 3, 1))

    def test_missing_required_field_names_kind_and_field(self):
        """Missing required fields fail fast with the document kind"""
        with self.assertRaises(InvalidDocumentRequest) as ctx:
            StudentCardData.from_dict({'student_id': 'STU-1', 'class_name': 'Class 5'})
        self.assertEqual(ctx.exception.kind, 'Student card')
        self.assertEqual(ctx.exception.field, 'name')
        self.assertIn("missing required field 'name'", str(ctx.exception))

    def test_blank_required_field_is_rejected(self):
        with self.assertRaises(InvalidDocumentRequest):
            StudentCardData(student_id='  ', name='Ali', class_name='Class 5')

    def test_nested_error_reports_path(self):
        """A bad entry is reported against the outer document"""
        data = class_attendance_dict(students=2)
        del data['students'][1]['name']
        with self.assertRaises(InvalidDocumentRequest) as ctx:
            ClassAttendanceRequest.from_dict(data)
        self.assertEqual(ctx.exception.kind, 'Attendance')
        self.assertEqual(ctx.exception.field, 'students[1].name')

    def test_unknown_keys_are_ignored(self):
        card = StudentCardData.from_dict({'student_id': 'STU-1', 'name': 'Ali', 'class_name': '5',
                                          'favourite_colour': 'blue'})
        self.assertEqual(card.name, 'Ali')

    def test_records_are_immutable(self):
        card = StudentCardData(student_id='STU-1', name='Ali', class_name='5')
        with self.assertRaises(Exception):
            card.name = 'Other'

    def test_iso_dates_are_coerced(self):
        card = StudentCardData(student_id='STU-1', name='Ali', class_name='5', date_of_birth='2010-03-15')
        self.assertEqual(card.date_of_birth, date(2010, 3, 15))

    def test_bad_date_is_an_invalid_request(self):
        with self.assertRaises(InvalidDocumentRequest) as ctx:
            StudentCardData(student_id='STU-1', name='Ali', class_name='5', date_of_birth='15/03/2010')
        self.assertEqual(ctx.exception.field, 'date_of_birth')

    def test_to_dict_round_trips_plain_values(self):
        card = StudentCardData(student_id='STU-1', name='Ali', class_name='5')
        self.assertEqual(card.to_dict()['student_id'], 'STU-1')


class TestAttendanceRecords(unittest.TestCase):

    def test_status_is_normalised(self):
        record = AttendanceRecord(date='2024-03-01', status=' PRESENT ')
        self.assertEqual(record.status, 'present')

    def test_duplicate_dates_are_rejected(self):
        with self.assertRaises(InvalidDocumentRequest) as ctx:
            IndividualAttendanceRequest.from_dict({
                'student_id': 'STU-1', 'name': 'Ali', 'class_name': '5', 'month': '2024-03',
                'attendance': [{'date': '2024-03-01', 'status': 'present'},
                               {'date': '2024-03-01', 'status': 'absent'}],
            })
        self.assertIn('2024-03-01', str(ctx.exception))

    def test_coerce_month(self):
        self.assertEqual(coerce_month('2024-02'), date(2024, 2, 1))
        self.assertEqual(coerce_month('2024-02-17'), date(2024, 2, 1))
        self.assertEqual(coerce_month(date(2024, 2, 29)), date(2024, 2, 1))
        with self.assertRaises(ValueError):
            coerce_month('Feb 2024')

    def test_invalid_month_is_an_invalid_request(self):
        data = class_attendance_dict(students=1, month='March')
        with self.assertRaises(InvalidDocumentRequest) as ctx:
            ClassAttendanceRequest.from_dict(data)
        self.assertEqual(ctx.exception.field, 'month')


class TestAcademicRecords(unittest.TestCase):

    def test_timetable_day_and_times_normalised(self):
        entry = TimetableEntry(day='monday', start_time='8:00', end_time='08:45', subject='Maths')
        self.assertEqual(entry.day, 'Monday')
        self.assertEqual(entry.start_time, '08:00')

    def test_sunday_is_not_a_timetable_day(self):
        with self.assertRaises(InvalidDocumentRequest) as ctx:
            ClassTimetableRequest.from_dict({
                'class_name': '5',
                'entries': [{'day': 'Sunday', 'start_time': '08:00', 'end_time': '08:45', 'subject': 'Art'}],
            })
        self.assertEqual(ctx.exception.field, 'entries[0].day')

    def test_bad_time_rejected(self):
        with self.assertRaises(InvalidDocumentRequest):
            TimetableEntry(day='Monday', start_time='25:00', end_time='26:00', subject='Maths')


class TestMarksRecords(unittest.TestCase):

    def test_marks_cannot_exceed_total(self):
        with self.assertRaises(InvalidDocumentRequest):
            StudentResult(student_id='STU-1', name='Ali', marks_obtained=120, total_marks=100)

    def test_award_list_total(self):
        self.assertEqual(AwardListEntry('STU-1', 'Ali', theory=55, practical=20).computed_total, 75)
        self.assertEqual(AwardListEntry('STU-1', 'Ali', theory=55, practical=20, total=70).computed_total, 70)
        self.assertIsNone(AwardListEntry('STU-1', 'Ali').computed_total)

    def test_certificate_subjects_validated(self):
        with self.assertRaises(InvalidDocumentRequest) as ctx:
            MarksCertificateData.from_dict({
                'student_id': 'STU-1', 'name': 'Ali', 'class_name': '10',
                'subjects': [{'subject': 'English', 'total_marks': 100, 'obtained_marks': -1}],
            })
        self.assertEqual(ctx.exception.field, 'subjects[0].obtained_marks')


class TestFeeRecords(unittest.TestCase):

    def _invoice(self, **overrides):
        data = {
            'invoice_number': 'INV-001', 'student_id': 'STU-1', 'student_name': 'Ali', 'class_name': '5',
            'items': [{'description': 'Tuition Fee', 'amount': 5000},
                      {'description': 'Exam Fee', 'amount': 1000}],
            'discount': 500, 'due_date': '2024-03-10',
        }
        data.update(overrides)
        return InvoiceData.from_dict(data)

    def test_invoice_totals(self):
        invoice = self._invoice(paid_amount=2000)
        self.assertEqual(invoice.subtotal, 6000)
        self.assertEqual(invoice.final_amount, 5500)
        self.assertEqual(invoice.balance, 3500)

    def test_invoice_partial_payment_balance(self):
        invoice = self._invoice(items=[{'description': 'Tuition Fee', 'amount': 5000}], discount=0,
                                paid_amount=2000)
        self.assertEqual(invoice.final_amount, 5000)
        self.assertEqual(invoice.balance, 3000)
        self.assertEqual(invoice.resolved_status(), 'partial')
        self.assertEqual(invoice.resolved_status(date(2024, 3, 15)), 'partial')

    def test_balance_never_negative(self):
        self.assertEqual(self._invoice(paid_amount=9000).balance, 0)

    def test_paid_amount_falls_back_to_payments(self):
        invoice = self._invoice(payments=[{'amount': 1000, 'paid_on': '2024-03-01'},
                                          {'amount': 500, 'paid_on': '2024-03-05'}])
        self.assertEqual(invoice.total_paid, 1500)

    def test_status_derivation(self):
        as_of = date(2024, 3, 15)
        self.assertEqual(self._invoice(paid_amount=5500).resolved_status(as_of), 'paid')
        self.assertEqual(self._invoice(paid_amount=100).resolved_status(as_of), 'partial')
        self.assertEqual(self._invoice().resolved_status(as_of), 'overdue')
        self.assertEqual(self._invoice().resolved_status(date(2024, 3, 1)), 'pending')
        self.assertEqual(self._invoice(status='PAID').resolved_status(as_of), 'paid')

    def test_unknown_status_rejected(self):
        with self.assertRaises(InvalidDocumentRequest):
            self._invoice(status='waived')

    def test_negative_discount_rejected(self):
        with self.assertRaises(InvalidDocumentRequest):
            self._invoice(discount=-5)

    def test_derive_fee_status_zero_amount(self):
        self.assertEqual(derive_fee_status(0, 0), 'paid')

    def test_fee_report_entry(self):
        report = ClassFeeReportRequest.from_dict({
            'class_name': '5', 'entries': [{'student_id': 'STU-1', 'name': 'Ali', 'assigned': 3000,
                                            'discount': 1000, 'paid': 500}],
        })
        entry = report.entries[0]
        self.assertIsInstance(entry, FeeReportEntry)
        self.assertEqual(entry.balance, 1500)
        self.assertEqual(entry.resolved_status(), 'partial')


class TestGeneratedArtifact(unittest.TestCase):

    def setUp(self):
        self.artifact = GeneratedArtifact('Invoice', 'Invoice-Ali-1.pdf', b'%PDF-1.4 body', 2)

    def test_binary_is_stable(self):
        self.assertEqual(self.artifact.to_binary(), self.artifact.to_binary())

    def test_blob_carries_content_type(self):
        blob = self.artifact.to_blob()
        self.assertEqual(blob.content_type, 'application/pdf')
        self.assertEqual(blob.filename, 'Invoice-Ali-1.pdf')
        self.assertEqual(blob.data, b'%PDF-1.4 body')

    def test_save_into_directory(self):
        with tempfile.TemporaryDirectory() as directory:
            path = self.artifact.save(directory)
            self.assertEqual(os.path.basename(path), 'Invoice-Ali-1.pdf')
            with open(path, 'rb') as fh:
                self.assertEqual(fh.read(), b'%PDF-1.4 body')

    def test_save_to_explicit_path(self):
        with tempfile.TemporaryDirectory() as directory:
            target = os.path.join(directory, 'custom.pdf')
            self.assertEqual(self.artifact.save(target), target)
            self.assertTrue(os.path.exists(target))


if __name__ == '__main__':
    unittest.main()
