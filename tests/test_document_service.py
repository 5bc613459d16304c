"""
Tests for request dispatch through the document service
"""

import os
import tempfile
import unittest

from models import (
    ClassAttendanceRequest, InvalidDocumentRequest, InvoiceData, ReceiptData, StudentCardData, StudentListRequest
)
from services.document_service import GENERATORS, DocumentService
from services.preview_service import IDLE, READY
from fakes import GENERATED_ON, CountingResourceFactory, FakeAssetLoader, class_attendance_dict, student_entries


def sample_requests():
    return [
        ClassAttendanceRequest.from_dict(class_attendance_dict(students=2)),
        StudentCardData.from_dict({'student_id': 'STU-1', 'name': 'Ali Khan', 'class_name': 'Class 5'}),
        StudentListRequest.from_dict({'class_name': 'Class 5', 'students': student_entries(['STU-1', 'STU-2'])}),
        ReceiptData.from_dict({'receipt_number': 'RCP-9', 'student_id': 'STU-1', 'student_name': 'Ali Khan',
                               'class_name': 'Class 5', 'amount': 1500, 'paid_on': '2024-03-02'}),
        InvoiceData.from_dict({'invoice_number': 'INV-1', 'student_id': 'STU-1', 'student_name': 'Ali Khan',
                               'class_name': 'Class 5', 'items': [{'description': 'Tuition', 'amount': 100}]}),
    ]


class TestDocumentService(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.assets = FakeAssetLoader()

    def test_every_request_type_is_registered(self):
        self.assertEqual(len(GENERATORS), 17)

    async def test_generate_dispatches_by_request_type(self):
        for request in sample_requests():
            with self.subTest(request=type(request).__name__):
                artifact = await DocumentService.generate(request, self.assets, GENERATED_ON)
                self.assertTrue(artifact.to_binary().startswith(b'%PDF'))
                self.assertEqual(artifact.filename, DocumentService.suggested_filename(request))

    async def test_unsupported_request(self):
        with self.assertRaises(InvalidDocumentRequest):
            await DocumentService.generate({'class_name': 'Class 5'}, self.assets, GENERATED_ON)
        with self.assertRaises(InvalidDocumentRequest):
            DocumentService.suggested_filename(object())

    async def test_save_writes_suggested_filename(self):
        request = sample_requests()[1]
        with tempfile.TemporaryDirectory() as directory:
            path = await DocumentService.save(request, directory, self.assets, GENERATED_ON)
            self.assertEqual(os.path.basename(path), 'StudentCard-Ali-Khan-STU-1.pdf')
            with open(path, 'rb') as fh:
                self.assertTrue(fh.read().startswith(b'%PDF'))

    async def test_preview_then_download(self):
        factory = CountingResourceFactory()
        request = sample_requests()[0]
        controller = DocumentService.preview(request, self.assets, GENERATED_ON, resource_factory=factory)
        self.assertEqual(controller.state, IDLE)
        self.assertEqual(factory.created, [])
        session = await controller.open()
        self.assertEqual(session.state, READY)
        self.assertEqual(controller.title, 'Attendance-Class-5-A-March-2024')
        with tempfile.TemporaryDirectory() as directory:
            path = controller.download(directory)
            self.assertEqual(path.name, 'Attendance-Class-5-A-March-2024.pdf')
        self.assertEqual(factory.live, 0)


if __name__ == '__main__':
    unittest.main()
