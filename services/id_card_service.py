"""
ID card service for the Suffah school document pipeline
CR80 student and staff cards: front and back page per card, QR code on the back
"""

import logging
from collections import namedtuple
from datetime import date

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit

from models.artifact import GeneratedArtifact
from services.asset_loader import AssetLoader
from services.pdf_layout import (
    CARD_SIZE, DARK, GOLD, GRAY, LIGHT_GRAY, PRIMARY, WHITE, PaginatedDocument, build_filename,
    class_label, fit_font_size, now, resolve_organization
)
from utils.formatters import display, format_date, initials
from utils.sorting_helpers import SortingHelpers

logger = logging.getLogger(__name__)

STUDENT_TERMS = (
    'This card is the property of the school and must be carried at all times on campus.',
    'The card is not transferable.',
    'Loss of the card must be reported to the school office immediately.',
    'If found, please return to the school address below.',
)
STAFF_TERMS = (
    'This card must be displayed while on school premises.',
    'The card remains the property of the school and is not transferable.',
    'Report loss of the card to the administration office immediately.',
)

CardFace = namedtuple('CardFace', [
    'title', 'name', 'front_lines', 'back_lines', 'terms', 'qr_value', 'issue_date', 'expiry_date',
])


def default_validity(issue_date, generated_on):
    """Issue date defaults to the generation day; cards expire at the end of the following year"""
    issued = issue_date or generated_on.date()
    return issued, date(issued.year + 1, 12, 31)


class IdCardService:
    """Service for identity cards"""

    @staticmethod
    def _draw_qr(canv, value, x, y, size):
        widget = QrCodeWidget(value)
        widget.barFillColor = DARK
        x1, y1, x2, y2 = widget.getBounds()
        drawing = Drawing(size, size, transform=[size / (x2 - x1), 0, 0, size / (y2 - y1), 0, 0])
        drawing.add(widget)
        renderPDF.draw(drawing, canv, x, y)

    @staticmethod
    def _draw_front(canv, face, organization, logo, photo):
        width, height = CARD_SIZE
        # Top band with logo and school name
        canv.setFillColor(PRIMARY)
        canv.rect(0, height - 19 * mm, width, 19 * mm, stroke=0, fill=1)
        canv.setFillColor(GOLD)
        canv.rect(0, height - 24 * mm, width, 5 * mm, stroke=0, fill=1)

        radius = 5.5 * mm
        cx, cy = 3 * mm + radius, height - 9.5 * mm
        canv.setFillColor(WHITE)
        canv.circle(cx, cy, radius, stroke=0, fill=1)
        if logo is not None:
            side = radius * 1.45
            canv.drawImage(logo.reader, cx - side / 2, cy - side / 2, width=side, height=side,
                           mask='auto', preserveAspectRatio=True)
        else:
            canv.setFillColor(PRIMARY)
            canv.setFont('Helvetica-Bold', 7)
            canv.drawCentredString(cx, cy - 2.5, initials(organization.name))

        text_left = cx + radius + 1.5 * mm
        text_width = width - text_left - 2 * mm
        lines = simpleSplit(organization.name, 'Helvetica-Bold', 6.5, text_width)[:3]
        canv.setFillColor(WHITE)
        canv.setFont('Helvetica-Bold', 6.5)
        text_y = cy + (len(lines) - 1) * 3.8
        for line in lines:
            canv.drawString(text_left, text_y, line)
            text_y -= 7.5
        canv.setFillColor(WHITE)
        canv.setFont('Helvetica-Bold', fit_font_size(face.title, 'Helvetica-Bold', 7, width - 4 * mm))
        canv.drawCentredString(width / 2, height - 22.3 * mm, face.title)

        # Photo box
        photo_w, photo_h = 20 * mm, 24 * mm
        px, py = (width - photo_w) / 2, height - 26 * mm - photo_h
        if photo is not None:
            canv.drawImage(photo.reader, px, py, width=photo_w, height=photo_h, mask='auto',
                           preserveAspectRatio=True)
        else:
            canv.setFillColor(LIGHT_GRAY)
            canv.rect(px, py, photo_w, photo_h, stroke=0, fill=1)
            canv.setFillColor(GRAY)
            canv.setFont('Helvetica', 7)
            canv.drawCentredString(width / 2, py + photo_h / 2 - 2, 'Photo')
        canv.setStrokeColor(PRIMARY)
        canv.setLineWidth(0.8)
        canv.rect(px, py, photo_w, photo_h, stroke=1, fill=0)

        # Name and details
        y = py - 4.5 * mm
        canv.setFillColor(PRIMARY)
        canv.setFont('Helvetica-Bold', fit_font_size(face.name, 'Helvetica-Bold', 9, width - 4 * mm))
        canv.drawCentredString(width / 2, y, face.name)
        y -= 4.2 * mm
        for label, value in face.front_lines:
            canv.setFillColor(GRAY)
            canv.setFont('Helvetica-Bold', 6)
            canv.drawString(4 * mm, y, f'{label}:')
            canv.setFillColor(DARK)
            canv.setFont('Helvetica', fit_font_size(value, 'Helvetica', 6.5, width - 22 * mm, min_size=4.5))
            canv.drawString(19 * mm, y, value)
            y -= 3.4 * mm

        # Bottom band
        canv.setFillColor(PRIMARY)
        canv.rect(0, 0, width, 5 * mm, stroke=0, fill=1)
        canv.setFillColor(WHITE)
        canv.setFont('Helvetica', fit_font_size(organization.address, 'Helvetica', 6, width - 4 * mm, 4))
        canv.drawCentredString(width / 2, 1.8 * mm, organization.address)

    @staticmethod
    def _draw_back(canv, face, organization):
        width, height = CARD_SIZE
        canv.setFillColor(PRIMARY)
        canv.rect(0, height - 8 * mm, width, 8 * mm, stroke=0, fill=1)
        canv.setFillColor(WHITE)
        canv.setFont('Helvetica-Bold', 7)
        canv.drawCentredString(width / 2, height - 5.2 * mm, 'TERMS & CONDITIONS')

        y = height - 12 * mm
        canv.setFillColor(DARK)
        canv.setFont('Helvetica', 5.3)
        for index, term in enumerate(face.terms, 1):
            for line in simpleSplit(f'{index}. {term}', 'Helvetica', 5.3, width - 6 * mm):
                canv.drawString(3 * mm, y, line)
                y -= 2.5 * mm
        y -= 1.5 * mm
        canv.setStrokeColor(GOLD)
        canv.setLineWidth(0.6)
        canv.line(3 * mm, y + 1.2 * mm, width - 3 * mm, y + 1.2 * mm)
        y -= 2 * mm
        for label, value in face.back_lines:
            canv.setFillColor(GRAY)
            canv.setFont('Helvetica-Bold', 6)
            canv.drawString(3 * mm, y, f'{label}:')
            canv.setFillColor(DARK)
            canv.setFont('Helvetica', fit_font_size(value, 'Helvetica', 6.3, width - 26 * mm, min_size=4.5))
            canv.drawString(23 * mm, y, value)
            y -= 3.4 * mm

        qr_size = 17 * mm
        qr_y = 14 * mm
        IdCardService._draw_qr(canv, face.qr_value, (width - qr_size) / 2, qr_y, qr_size)

        canv.setFillColor(DARK)
        canv.setFont('Helvetica', 5.5)
        canv.drawString(3 * mm, 10 * mm, f'Issued: {format_date(face.issue_date, "%d/%m/%y")}')
        canv.drawRightString(width - 3 * mm, 10 * mm, f'Expires: {format_date(face.expiry_date, "%d/%m/%y")}')

        canv.setStrokeColor(DARK)
        canv.setLineWidth(0.4)
        canv.line(width - 22 * mm, 7 * mm, width - 3 * mm, 7 * mm)
        canv.setFont('Helvetica', 5)
        canv.drawCentredString(width - 12.5 * mm, 5 * mm, 'Principal')

        canv.setFillColor(GRAY)
        canv.setFont('Helvetica', fit_font_size(organization.phone, 'Helvetica', 5, 28 * mm, 4))
        canv.drawString(3 * mm, 5 * mm, organization.phone)

    @staticmethod
    def _student_face(student, generated_on, roll_number=None):
        issued, default_expiry = default_validity(student.issue_date, generated_on)
        class_text = class_label(student.class_name, student.section)
        return CardFace(
            title='STUDENT IDENTITY CARD',
            name=student.name,
            front_lines=[
                ('Student ID', student.student_id),
                ('Class', class_text),
                ('Roll No.', display(roll_number or student.roll_number)),
                ("Father's Name", display(student.father_name)),
                ('Date of Birth', format_date(student.date_of_birth)),
            ],
            back_lines=[
                ('Father/Guardian', display(student.father_name)),
                ('Blood Group', display(student.blood_group, 'N/A')),
                ('Contact', display(student.phone)),
                ('Address', display(student.address)),
            ],
            terms=STUDENT_TERMS,
            qr_value=student.student_id,
            issue_date=issued,
            expiry_date=student.expiry_date or default_expiry,
        )

    @staticmethod
    def _draw_card(canv, face, organization, logo, photo):
        """One card: front page then back page"""
        IdCardService._draw_front(canv, face, organization, logo, photo)
        canv.showPage()
        IdCardService._draw_back(canv, face, organization)
        canv.showPage()

    @staticmethod
    async def generate_student_card(student, assets=None, generated_on=None):
        """Generate a single student ID card (front and back)."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(student)
        logo = await assets.load_logo()
        photo = await assets.load_image(student.photo_url)

        document = PaginatedDocument('StudentCard', pagesize=CARD_SIZE, title=f'ID Card - {student.name}')
        canv = document.open_canvas()
        IdCardService._draw_card(canv, IdCardService._student_face(student, generated_on), organization, logo, photo)
        pdf_bytes = document.finish()
        filename = build_filename('StudentCard', student.name, student.student_id)
        logger.info("Generated student card %s", filename)
        return GeneratedArtifact('StudentCard', filename, pdf_bytes, document.page_count)

    @staticmethod
    async def generate_bulk_student_cards(request, assets=None, generated_on=None):
        """Generate ID cards for every student in a class, ordered by student id."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        logo = await assets.load_logo()
        ordered = SortingHelpers.assign_roll_numbers(request.students)
        photos = await assets.load_many([student.photo_url for _, student in ordered])

        label = class_label(request.class_name, request.section)
        document = PaginatedDocument('StudentCards', pagesize=CARD_SIZE, title=f'ID Cards - {label}')
        canv = document.open_canvas()
        for roll_number, student in ordered:
            face = IdCardService._student_face(student, generated_on, roll_number)
            IdCardService._draw_card(canv, face, resolve_organization(student), logo,
                                     photos.get(student.photo_url))
        if not ordered:
            IdCardService._draw_empty_notice(canv, label)
        pdf_bytes = document.finish()
        filename = build_filename('StudentCards', request.class_name, request.section or 'All')
        logger.info("Generated %d student cards for %s", len(ordered), label)
        return GeneratedArtifact('StudentCards', filename, pdf_bytes, document.page_count, len(ordered))

    @staticmethod
    def _draw_empty_notice(canv, label):
        width, height = CARD_SIZE
        canv.setFillColor(GRAY)
        canv.setFont('Helvetica-Bold', 8)
        canv.drawCentredString(width / 2, height / 2 + 2 * mm, 'No students to print')
        canv.setFont('Helvetica', 6.5)
        canv.drawCentredString(width / 2, height / 2 - 2 * mm, label)
        canv.showPage()

    @staticmethod
    async def generate_teacher_card(teacher, assets=None, generated_on=None):
        """Generate a staff ID card (front and back)."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(teacher)
        logo = await assets.load_logo()
        photo = await assets.load_image(teacher.photo_url)

        issued, default_expiry = default_validity(teacher.issue_date, generated_on)
        face = CardFace(
            title='STAFF IDENTITY CARD',
            name=teacher.name,
            front_lines=[
                ('Staff ID', teacher.teacher_id),
                ('Designation', display(teacher.designation, 'Teacher')),
                ('Subject', display(teacher.subject)),
                ('Joined', format_date(teacher.joining_date)),
            ],
            back_lines=[
                ('CNIC', display(teacher.cnic)),
                ('Blood Group', display(teacher.blood_group, 'N/A')),
                ('Contact', display(teacher.phone)),
                ('Email', display(teacher.email)),
            ],
            terms=STAFF_TERMS,
            qr_value=teacher.teacher_id,
            issue_date=issued,
            expiry_date=teacher.expiry_date or default_expiry,
        )
        document = PaginatedDocument('TeacherCard', pagesize=CARD_SIZE, title=f'Staff Card - {teacher.name}')
        canv = document.open_canvas()
        IdCardService._draw_card(canv, face, organization, logo, photo)
        pdf_bytes = document.finish()
        filename = build_filename('TeacherCard', teacher.name, teacher.teacher_id)
        logger.info("Generated teacher card %s", filename)
        return GeneratedArtifact('TeacherCard', filename, pdf_bytes, document.page_count)
