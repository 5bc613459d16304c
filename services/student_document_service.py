"""
Student document service for the Suffah school document pipeline
Class list, weekly timetable and admission form
"""

import logging

from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Spacer, Table, TableStyle

from models.academic import TIMETABLE_DAYS
from models.artifact import GeneratedArtifact
from services.asset_loader import AssetLoader
from services.pdf_layout import (
    BODY_STYLE, GRAY, LANDSCAPE, PORTRAIT, SMALL_STYLE, CellStyle, ColumnRule, PaginatedDocument,
    build_filename, class_label, details_table, draw_header, footer_stamp, now, photo_or_placeholder,
    render_table, resolve_organization, section_heading
)
from utils.formatters import display, format_date, format_time
from utils.sorting_helpers import SortingHelpers

logger = logging.getLogger(__name__)


class StudentDocumentService:
    """Service for class lists, timetables and admission forms"""

    @staticmethod
    async def generate_student_list(request, assets=None, generated_on=None):
        """Generate a printable class list ordered by student id."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(request)
        logo = await assets.load_logo()

        label = class_label(request.class_name, request.section)
        subtitle = label + (f'  |  Session {request.session}' if request.session else '')
        document = PaginatedDocument(
            'StudentList', pagesize=PORTRAIT, title=f'Student List - {label}',
            page_stamp=footer_stamp(generated_on, ('Class Teacher', 'Principal'), organization),
            header=lambda canv: draw_header(canv, 'STUDENT LIST', subtitle, organization, logo),
        )
        rows = []
        for roll_number, student in SortingHelpers.assign_roll_numbers(request.students):
            rows.append([roll_number, student.student_id, student.name, display(student.father_name),
                         display(student.address), display(student.phone)])
        table = render_table(
            ['Roll No.', 'Student ID', 'Name', 'Father Name', 'Address', 'Phone'], rows,
            [ColumnRule(8, 'CENTER', False), ColumnRule(13, 'CENTER', False), ColumnRule(20),
             ColumnRule(20), ColumnRule(25), ColumnRule(14, 'CENTER')],
            document.body_width, font_size=8,
        )
        story = [
            table,
            Spacer(1, 4 * mm),
            Paragraph(f'<b>Total Students: {len(rows)}</b>', BODY_STYLE),
        ]
        pdf_bytes = document.build(story)
        filename = build_filename('StudentList', request.class_name, request.section or 'All')
        logger.info("Generated student list %s (%d students)", filename, len(rows))
        return GeneratedArtifact('StudentList', filename, pdf_bytes, document.page_count, len(rows))

    @staticmethod
    def timetable_grid(entries):
        """Sorted (start, end) slots and {(day, slot): [entries]}"""
        slots = sorted({(entry.start_time, entry.end_time) for entry in entries},
                       key=SortingHelpers.get_time_slot_sort_key)
        cells = {}
        for entry in entries:
            cells.setdefault((entry.day, (entry.start_time, entry.end_time)), []).append(entry)
        return slots, cells

    @staticmethod
    def _period_text(entry):
        lines = [entry.subject]
        if entry.teacher:
            lines.append(entry.teacher)
        if entry.room:
            lines.append(f'({entry.room})')
        return '\n'.join(lines)

    @staticmethod
    async def generate_class_timetable(request, assets=None, generated_on=None):
        """Generate the weekly timetable grid (Monday to Saturday by time slot)."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(request)
        logo = await assets.load_logo()

        label = class_label(request.class_name, request.section)
        subtitle = label + (f'  |  Session {request.session}' if request.session else '')
        document = PaginatedDocument(
            'Timetable', pagesize=LANDSCAPE, title=f'Timetable - {label}',
            page_stamp=footer_stamp(generated_on, ('Coordinator', 'Principal'), organization),
            header=lambda canv: draw_header(canv, 'CLASS TIMETABLE', subtitle, organization, logo),
        )
        slots, cells = StudentDocumentService.timetable_grid(request.entries)
        rows = []
        for slot in slots:
            row = [f'{format_time(slot[0])}\n{format_time(slot[1])}']
            for day in TIMETABLE_DAYS:
                periods = cells.get((day, slot), [])
                row.append('\n'.join(StudentDocumentService._period_text(p) for p in periods) or '-')
            rows.append(row)

        def cell_style(row_index, col_index, value):
            if col_index == 0:
                return CellStyle(bold=True)
            if value == '-':
                return CellStyle(GRAY)
            return None

        table = render_table(['Time'] + list(TIMETABLE_DAYS), rows,
                             [ColumnRule(12, 'CENTER')] + [ColumnRule(14.6, 'CENTER')] * len(TIMETABLE_DAYS),
                             document.body_width, cell_style, font_size=8)
        story = [table]
        if not rows:
            story.extend([Spacer(1, 4 * mm), Paragraph('No periods have been scheduled for this class.',
                                                       SMALL_STYLE)])
        pdf_bytes = document.build(story)
        filename = build_filename('Timetable', request.class_name, request.section or 'All')
        logger.info("Generated timetable %s (%d slots)", filename, len(slots))
        return GeneratedArtifact('Timetable', filename, pdf_bytes, document.page_count)

    @staticmethod
    async def generate_admission_form(form, assets=None, generated_on=None):
        """Generate a filled admission form for one student."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(form)
        logo = await assets.load_logo()
        photo = await assets.load_image(form.photo_url)

        document = PaginatedDocument(
            'AdmissionForm', pagesize=PORTRAIT, title=f'Admission Form - {form.name}',
            page_stamp=footer_stamp(generated_on, ('Parent/Guardian Signature', 'Admission Officer', 'Principal'),
                                    organization),
            header=lambda canv: draw_header(canv, 'ADMISSION FORM', f'Form No. {form.student_id}', organization,
                                            logo),
        )
        width = document.body_width
        photo_width = 32 * mm

        top = Table([[
            details_table([
                ('Student ID', form.student_id),
                ('Admission Date', format_date(form.admission_date or generated_on.date())),
                ('Class Applied For', class_label(form.class_name, form.section)),
            ], width - photo_width - 4 * mm, columns=1),
            photo_or_placeholder(photo, 28 * mm, 34 * mm, caption='Passport Photo'),
        ]], colWidths=[width - photo_width, photo_width])
        top.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('ALIGN', (1, 0), (1, 0), 'RIGHT'),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
            ('RIGHTPADDING', (0, 0), (-1, -1), 0),
        ]))

        checklist_rows = [[f'[   ]  {document_name}'] for document_name in form.documents] or [['-']]
        checklist = Table(checklist_rows, colWidths=[width])
        checklist.setStyle(TableStyle([
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('TOPPADDING', (0, 0), (-1, -1), 2),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
        ]))

        story = [
            top,
            Spacer(1, 4 * mm),
            section_heading('STUDENT INFORMATION', width),
            details_table([
                ('Full Name', form.name),
                ('Gender', display(form.gender)),
                ('Date of Birth', format_date(form.date_of_birth)),
                ('B-Form No.', display(form.b_form_number)),
                ('Religion', display(form.religion)),
                ('Blood Group', display(form.blood_group, 'N/A')),
            ], width),
            Spacer(1, 3 * mm),
            section_heading('FATHER / GUARDIAN INFORMATION', width),
            details_table([
                ("Father's Name", display(form.father_name)),
                ("Father's CNIC", display(form.father_cnic)),
                ('Occupation', display(form.father_occupation)),
                ('Phone', display(form.father_phone)),
                ('Guardian Name', display(form.guardian_name)),
                ('Relation', display(form.guardian_relation)),
                ('Guardian Phone', display(form.guardian_phone)),
            ], width),
            Spacer(1, 3 * mm),
            section_heading('ADDRESS & PREVIOUS EDUCATION', width),
            details_table([
                ('Address', display(form.address)),
                ('City', display(form.city)),
                ('Previous School', display(form.previous_school)),
                ('Previous Class', display(form.previous_class)),
            ], width),
            Spacer(1, 3 * mm),
            section_heading('LOGIN CREDENTIALS', width),
            details_table([
                ('Email / Username', display(form.login_email)),
                ('Password', display(form.login_password)),
            ], width),
            Spacer(1, 3 * mm),
            section_heading('DOCUMENTS CHECKLIST', width),
            checklist,
            Spacer(1, 4 * mm),
            Paragraph('I certify that the information given above is correct and I agree to abide by the '
                      'rules and regulations of the school.', SMALL_STYLE),
        ]
        pdf_bytes = document.build(story)
        filename = build_filename('AdmissionForm', form.name, form.student_id)
        logger.info("Generated admission form %s", filename)
        return GeneratedArtifact('AdmissionForm', filename, pdf_bytes, document.page_count)
