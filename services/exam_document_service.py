"""
Examination document service for the Suffah school document pipeline
Roll-number slips, class results, award lists and marks certificates
"""

import logging
from xml.sax.saxutils import escape as xml_escape

from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, Spacer, Table, TableStyle

from config import Config
from models.artifact import GeneratedArtifact
from models.marks import RollNumberSlipData
from services.asset_loader import AssetLoader
from services.pdf_layout import (
    BODY_STYLE, DANGER, GOOD, LIGHT_GRAY, PORTRAIT, SMALL_STYLE, TITLE_STYLE, CellStyle, ColumnRule,
    PaginatedDocument, build_filename, class_label, column_styler, details_table, draw_header, footer_stamp,
    hex_color, now, pass_fail_cell_style, percentage_cell_style, photo_or_placeholder, render_table,
    resolve_organization, section_heading
)
from utils.formatters import date_to_words, display, format_date, format_number, format_time, marks_to_words
from utils.grading import grade_for_percentage, is_pass, marks_percentage
from utils.sorting_helpers import SortingHelpers

logger = logging.getLogger(__name__)

SLIP_SIGNATURES = ("Principal's Signature", 'Controller of Examination')


class ExamDocumentService:
    """Service for examination documents"""

    # ------------------------- Roll-number slips -------------------------
    @staticmethod
    def _schedule_time(value):
        if not value:
            return '-'
        text = str(value)
        # Ranges like '09:00-12:00' are shown as written
        return format_time(text) if len(text.strip()) <= 5 else text

    @staticmethod
    def _slip_flowables(slip, photo, width, roll_number=None):
        """Per-student slip body shared by the single and class-wide generators"""
        roll = display(roll_number or slip.roll_number)
        details = details_table([
            ('Roll No.', roll),
            ('Student ID', slip.student_id),
            ('Student Name', slip.name),
            ("Father's Name", display(slip.father_name)),
            ('Class', class_label(slip.class_name, slip.section)),
            ('Session', display(slip.session)),
            ('Examination', slip.exam_name),
            ('Exam Centre', display(slip.exam_center, 'School Campus')),
        ], width - 34 * mm, columns=1)
        profile = Table([[details, photo_or_placeholder(photo, 28 * mm, 34 * mm)]],
                        colWidths=[width - 32 * mm, 32 * mm])
        profile.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('ALIGN', (1, 0), (1, 0), 'RIGHT'),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
            ('RIGHTPADDING', (0, 0), (-1, -1), 0),
        ]))

        rows = [[str(index), entry.subject, format_date(entry.date), ExamDocumentService._schedule_time(entry.time)]
                for index, entry in enumerate(slip.schedule, 1)]
        schedule = render_table(
            ['S.No', 'Subject', 'Date', 'Time'], rows,
            [ColumnRule(8, 'CENTER', False), ColumnRule(42), ColumnRule(22, 'CENTER', False),
             ColumnRule(28, 'CENTER')],
            width, font_size=9,
        )
        flowables = [profile, Spacer(1, 5 * mm), section_heading('EXAMINATION SCHEDULE', width), schedule]
        if not rows:
            flowables.append(Paragraph('The date sheet will be announced separately.', SMALL_STYLE))
        flowables.extend([Spacer(1, 5 * mm), section_heading('INSTRUCTIONS', width), Spacer(1, 1 * mm)])
        for index, instruction in enumerate(slip.instructions, 1):
            flowables.append(Paragraph(f'{index}. {xml_escape(str(instruction))}', SMALL_STYLE))
        return flowables

    @staticmethod
    def _slip_document(kind, title, subtitle, organization, logo, generated_on):
        return PaginatedDocument(
            kind, pagesize=PORTRAIT, title=title, repeat_header=True,
            page_stamp=footer_stamp(generated_on, SLIP_SIGNATURES, organization),
            header=lambda canv: draw_header(canv, 'ROLL NUMBER SLIP', subtitle, organization, logo),
        )

    @staticmethod
    async def generate_roll_number_slip(slip, assets=None, generated_on=None):
        """Generate an examination roll-number slip for one student."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(slip)
        logo = await assets.load_logo()
        photo = await assets.load_image(slip.photo_url)

        subtitle = slip.exam_name + (f'  |  Session {slip.session}' if slip.session else '')
        document = ExamDocumentService._slip_document('RollNumberSlip', f'Roll Number Slip - {slip.name}',
                                                      subtitle, organization, logo, generated_on)
        pdf_bytes = document.build(ExamDocumentService._slip_flowables(slip, photo, document.body_width))
        filename = build_filename('RollNumberSlip', slip.name, slip.student_id)
        logger.info("Generated roll number slip %s", filename)
        return GeneratedArtifact('RollNumberSlip', filename, pdf_bytes, document.page_count)

    @staticmethod
    async def generate_class_roll_number_slips(request, assets=None, generated_on=None):
        """Generate one roll-number slip per student in a class, one page each."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(request)
        logo = await assets.load_logo()
        ordered = SortingHelpers.assign_roll_numbers(request.students)
        photos = await assets.load_many([student.photo_url for _, student in ordered])

        subtitle = request.exam_name + (f'  |  Session {request.session}' if request.session else '')
        label = class_label(request.class_name, request.section)
        document = ExamDocumentService._slip_document('RollNumberSlips', f'Roll Number Slips - {label}',
                                                      subtitle, organization, logo, generated_on)
        story = []
        for index, (roll_number, student) in enumerate(ordered):
            slip = RollNumberSlipData(
                student_id=student.student_id, name=student.name, class_name=request.class_name,
                exam_name=request.exam_name, father_name=student.father_name, section=request.section,
                roll_number=roll_number, photo_url=student.photo_url, session=request.session,
                exam_center=request.exam_center, schedule=request.schedule, instructions=request.instructions,
            )
            if index:
                story.append(PageBreak())
            story.extend(ExamDocumentService._slip_flowables(slip, photos.get(student.photo_url),
                                                             document.body_width))
        if not story:
            story.append(Paragraph(f'No students found for {xml_escape(label)}.', BODY_STYLE))
        pdf_bytes = document.build(story)
        filename = build_filename('RollNumberSlips', request.class_name, request.exam_name)
        logger.info("Generated %d roll number slips for %s", len(ordered), label)
        return GeneratedArtifact('RollNumberSlips', filename, pdf_bytes, document.page_count, len(ordered))

    # ------------------------- Class results -------------------------
    @staticmethod
    def result_rows(results):
        """(rows, pass count, fail count, average percentage) for a result sheet"""
        rows = []
        passed = 0
        percentages = []
        for roll_number, result in SortingHelpers.assign_roll_numbers(results):
            percentage = marks_percentage(result.marks_obtained, result.total_marks)
            percentages.append(percentage)
            grade = result.grade or grade_for_percentage(percentage)
            status = 'PASS' if is_pass(percentage) else 'FAIL'
            if status == 'PASS':
                passed += 1
            rows.append([
                roll_number, result.student_id, result.name, display(result.father_name),
                f'{format_number(result.marks_obtained)}/{format_number(result.total_marks)}',
                f'{percentage:.1f}%', grade, status,
            ])
        average = sum(percentages) / len(percentages) if percentages else 0.0
        return rows, passed, len(rows) - passed, average

    @staticmethod
    async def generate_class_results(request, assets=None, generated_on=None):
        """Generate the result sheet for a class with pass/fail statistics."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(request)
        logo = await assets.load_logo()

        label = class_label(request.class_name, request.section)
        subtitle = f'{request.exam_name}  |  {label}' + (f'  |  {request.session}' if request.session else '')
        document = PaginatedDocument(
            'Results', pagesize=PORTRAIT, title=f'Results - {label} - {request.exam_name}',
            page_stamp=footer_stamp(generated_on, ('Class Teacher', 'Controller of Examination'), organization),
            header=lambda canv: draw_header(canv, 'CLASS RESULT SHEET', subtitle, organization, logo),
        )
        rows, passed, failed, average = ExamDocumentService.result_rows(request.results)
        stats = (f'<b>Total:</b> {len(rows)} &nbsp;&nbsp; <b>Pass:</b> <font color="{hex_color(GOOD)}">{passed}</font>'
                 f' &nbsp;&nbsp; <b>Fail:</b> <font color="{hex_color(DANGER)}">{failed}</font>'
                 f' &nbsp;&nbsp; <b>Avg:</b> {average:.1f}%')
        table = render_table(
            ['Roll No.', 'ID', 'Name', 'Father Name', 'Marks', '%', 'Grade', 'Status'], rows,
            [ColumnRule(8, 'CENTER', False), ColumnRule(11, 'CENTER', False), ColumnRule(22), ColumnRule(20),
             ColumnRule(11, 'CENTER', False), ColumnRule(9, 'CENTER', False), ColumnRule(8, 'CENTER', False),
             ColumnRule(9, 'CENTER', False)],
            document.body_width, column_styler({5: percentage_cell_style, 7: pass_fail_cell_style}),
            font_size=8,
        )
        story = [Paragraph(stats, BODY_STYLE), Spacer(1, 3 * mm), table]
        pdf_bytes = document.build(story)
        filename = build_filename('Results', request.class_name, request.exam_name)
        logger.info("Generated class results %s (%d students)", filename, len(rows))
        return GeneratedArtifact('Results', filename, pdf_bytes, document.page_count, len(rows))

    # ------------------------- Award list -------------------------
    @staticmethod
    async def generate_award_list(award_list, assets=None, generated_on=None):
        """Generate the subject award list (theory, practical and total per student)."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(award_list)
        logo = await assets.load_logo()

        subtitle = award_list.subject + (f'  |  {award_list.exam_name}' if award_list.exam_name else '')
        document = PaginatedDocument(
            'AwardList', pagesize=PORTRAIT, title=f'Award List - {award_list.class_name} - {award_list.subject}',
            page_stamp=footer_stamp(generated_on, ('Subject Teacher', 'Principal'), organization),
            header=lambda canv: draw_header(canv, 'AWARD LIST', subtitle, organization, logo),
        )
        width = document.body_width
        info = details_table([
            ('Session', display(award_list.session)),
            ('Date', format_date(award_list.exam_date or generated_on.date())),
            ('Max Marks', display(format_number(award_list.max_marks))),
            ('Class', award_list.class_name),
            ('Section', display(award_list.section)),
            ('', ''),
            ('Subject', award_list.subject),
            ('Teacher', display(award_list.teacher_name)),
            ('', ''),
        ], width, columns=3, font_size=8.5)

        rows = []
        for index, (_, entry) in enumerate(SortingHelpers.assign_roll_numbers(award_list.entries), 1):
            total = entry.computed_total
            rows.append([str(index), entry.student_id, entry.name, display(entry.father_name),
                         display(format_number(entry.theory)), display(format_number(entry.practical)),
                         display(format_number(total))])
        table = render_table(
            ['Sr.No', 'Student ID', 'Student Name', 'Father Name', 'Theory', 'Practical', 'Total'], rows,
            [ColumnRule(7, 'CENTER', False), ColumnRule(13, 'CENTER', False), ColumnRule(24), ColumnRule(24),
             ColumnRule(10, 'CENTER', False), ColumnRule(10, 'CENTER', False), ColumnRule(10, 'CENTER', False)],
            width, lambda r, c, v: CellStyle(bold=True) if c == 6 else None, font_size=8.5,
        )
        story = [
            Paragraph(xml_escape(Config.SCHOOL_REGISTRATION), SMALL_STYLE),
            Spacer(1, 2 * mm),
            info,
            Spacer(1, 4 * mm),
            table,
            Spacer(1, 3 * mm),
            Paragraph(f'<b>Total Students: {len(rows)}</b>', BODY_STYLE),
        ]
        pdf_bytes = document.build(story)
        filename = build_filename('AwardList', award_list.class_name, award_list.subject)
        logger.info("Generated award list %s (%d entries)", filename, len(rows))
        return GeneratedArtifact('AwardList', filename, pdf_bytes, document.page_count, len(rows))

    # ------------------------- Marks certificate -------------------------
    @staticmethod
    def certificate_rows(subjects):
        """Subject rows plus a TOTAL row; returns (rows, total marks, obtained marks)"""
        rows = []
        total_marks = 0
        obtained_marks = 0
        for index, subject in enumerate(subjects, 1):
            total_marks += subject.total_marks
            obtained_marks += subject.obtained_marks
            rows.append([str(index), subject.subject, str(format_number(subject.total_marks)),
                         str(format_number(subject.obtained_marks)), marks_to_words(subject.obtained_marks)])
        rows.append(['', 'TOTAL', str(format_number(total_marks)), str(format_number(obtained_marks)),
                     marks_to_words(obtained_marks)])
        return rows, total_marks, obtained_marks

    @staticmethod
    async def generate_marks_certificate(certificate, assets=None, generated_on=None):
        """Generate the provisional and detailed marks certificate for one student."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(certificate)
        logo = await assets.load_logo()
        photo = await assets.load_image(certificate.photo_url)

        subtitle = display(certificate.exam_name, 'Annual Examination') + (
            f'  |  Session {certificate.session}' if certificate.session else '')
        document = PaginatedDocument(
            'MarksCertificate', pagesize=PORTRAIT, title=f'Marks Certificate - {certificate.name}',
            page_stamp=footer_stamp(generated_on, ('Prepared By', 'Controller of Examination'), organization),
            header=lambda canv: draw_header(canv, 'PROVISIONAL AND DETAILED MARKS CERTIFICATE', subtitle,
                                            organization, logo),
        )
        width = document.body_width
        dob = certificate.date_of_birth
        details = details_table([
            ('Name', certificate.name),
            ("Father's Name", display(certificate.father_name)),
            ('Roll No.', display(certificate.roll_number)),
            ('Registration No.', display(certificate.registration_number, certificate.student_id)),
            ('Class', class_label(certificate.class_name, certificate.section)),
            ('Session', display(certificate.session)),
            ('Date of Birth', f'{format_date(dob)} ({date_to_words(dob)})' if dob else '-'),
        ], width - 32 * mm, columns=1)
        profile = Table([[details, photo_or_placeholder(photo, 26 * mm, 32 * mm)]],
                        colWidths=[width - 30 * mm, 30 * mm])
        profile.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('ALIGN', (1, 0), (1, 0), 'RIGHT'),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
            ('RIGHTPADDING', (0, 0), (-1, -1), 0),
        ]))

        rows, total_marks, obtained_marks = ExamDocumentService.certificate_rows(certificate.subjects)
        total_row = len(rows) - 1

        def cell_style(row_index, col_index, value):
            if row_index == total_row:
                return CellStyle(bold=True, background=LIGHT_GRAY)
            return None

        table = render_table(
            ['S.No', 'Subject', 'Total Marks', 'Marks Obtained', 'Marks in Words'], rows,
            [ColumnRule(7, 'CENTER', False), ColumnRule(30), ColumnRule(13, 'CENTER', False),
             ColumnRule(15, 'CENTER', False), ColumnRule(35)],
            width, cell_style, font_size=9, banded=False,
        )
        percentage = marks_percentage(obtained_marks, total_marks)
        passed = is_pass(percentage)
        result = Table([[
            f'Percentage: {percentage:.1f}%', f'Grade: {grade_for_percentage(percentage)}',
            'Result: PASS' if passed else 'Result: FAIL',
        ]], colWidths=[width / 3] * 3)
        result.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('BOX', (0, 0), (-1, -1), 0.5, LIGHT_GRAY),
            ('TEXTCOLOR', (2, 0), (2, 0), GOOD if passed else DANGER),
        ]))
        issued = certificate.issue_date or generated_on.date()
        story = [
            profile,
            Spacer(1, 5 * mm),
            Paragraph('Statement of Marks', TITLE_STYLE),
            table,
            Spacer(1, 4 * mm),
            result,
            Spacer(1, 4 * mm),
            Paragraph(f'Date of issue: {format_date(issued)}', SMALL_STYLE),
            Paragraph('This is a provisional certificate; errors and omissions are subject to correction.',
                      SMALL_STYLE),
        ]
        pdf_bytes = document.build(story)
        filename = build_filename('MarksCertificate', certificate.name, certificate.student_id)
        logger.info("Generated marks certificate %s", filename)
        return GeneratedArtifact('MarksCertificate', filename, pdf_bytes, document.page_count)
