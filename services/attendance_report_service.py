"""
Attendance report service for the Suffah school document pipeline
Monthly class register and individual student attendance report
"""

import logging

from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Spacer, Table, TableStyle

from config import Config
from models.artifact import GeneratedArtifact
from services.asset_loader import AssetLoader
from services.calendar_grid import (
    WEEKDAY_HEADERS, build_calendar_grid, days_in_month, register_symbols, summarize
)
from services.pdf_layout import (
    GRAY, LANDSCAPE, LIGHT_GRAY, PORTRAIT, STATUS_BY_NAME, CellStyle, ColumnRule,
    PaginatedDocument, SMALL_STYLE, attendance_cell_style, build_filename, build_legend, class_label,
    details_table, draw_header, footer_stamp, now, percentage_badge, percentage_cell_style,
    photo_or_placeholder, render_table, resolve_organization, stat_cards, status_color
)
from utils.formatters import display, round_half_up

logger = logging.getLogger(__name__)

KIND = 'Attendance'


class AttendanceReportService:
    """Service for attendance documents"""

    @staticmethod
    def _register_rows(request):
        """Rows for the register table plus each student's summary"""
        rows = []
        summaries = []
        for index, student in enumerate(request.students, 1):
            summary = summarize(student.attendance, request.month)
            summaries.append(summary)
            rows.append(
                [str(index), display(student.roll_number), student.name, display(student.father_name)]
                + register_symbols(request.month, student.attendance)
                + [str(summary.present), str(summary.absent), str(summary.late), str(summary.excused),
                   f'{summary.percentage}%']
            )
        return rows, summaries

    @staticmethod
    async def generate_class_register(request, assets=None, generated_on=None):
        """Generate the monthly attendance register for a class."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(request)
        logo = await assets.load_logo()

        month_label = request.month.strftime('%B %Y')
        subtitle = f'{class_label(request.class_name, request.section)}  |  {month_label}'
        document = PaginatedDocument(
            KIND, pagesize=LANDSCAPE, title=f'Attendance Register - {subtitle}',
            page_stamp=footer_stamp(generated_on, ('Class Teacher', 'Principal'), organization),
            header=lambda canv: draw_header(canv, 'MONTHLY ATTENDANCE REGISTER', subtitle, organization, logo),
        )

        day_count = days_in_month(request.month)
        headers = (['#', 'Roll No.', 'Student Name', 'Father Name']
                   + [str(day) for day in range(1, day_count + 1)]
                   + ['P', 'A', 'L', 'E', '%'])
        rules = ([ColumnRule(5, 'CENTER', False), ColumnRule(9, 'CENTER', False),
                  ColumnRule(24, 'LEFT'), ColumnRule(22, 'LEFT')]
                 + [ColumnRule(4.3, 'CENTER', False)] * day_count
                 + [ColumnRule(4.6, 'CENTER', False)] * 4 + [ColumnRule(7, 'CENTER', False)])
        first_day_col = 4
        percent_col = len(headers) - 1

        def cell_style(row_index, col_index, value):
            if first_day_col <= col_index < first_day_col + day_count:
                return attendance_cell_style(value)
            if col_index == percent_col:
                return percentage_cell_style(value)
            return None

        rows, summaries = AttendanceReportService._register_rows(request)
        table = render_table(headers, rows, rules, document.body_width, cell_style, font_size=6.5)

        story = [
            table,
            Spacer(1, 4 * mm),
            build_legend(document.body_width, trailing_text=f'Total Students: {len(request.students)}'),
        ]
        if summaries:
            average = round_half_up(sum(s.percentage for s in summaries) / len(summaries))
            story.append(Paragraph(f'Class average attendance: <b>{average}%</b>', SMALL_STYLE))

        pdf_bytes = document.build(story)
        filename = build_filename(KIND, class_label(request.class_name, request.section), month_label)
        logger.info("Generated attendance register %s (%d students, %d pages)",
                    filename, len(request.students), document.page_count)
        return GeneratedArtifact(KIND, filename, pdf_bytes, document.page_count, len(request.students))

    @staticmethod
    async def generate_individual_report(request, assets=None, generated_on=None):
        """Generate one student's monthly attendance report with a calendar view."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(request)
        logo = await assets.load_logo()
        photo = await assets.load_image(request.photo_url)

        month_label = request.month.strftime('%B %Y')
        document = PaginatedDocument(
            KIND, pagesize=PORTRAIT, title=f'Attendance Report - {request.name} - {month_label}',
            page_stamp=footer_stamp(generated_on, ('Class Teacher', 'Principal'), organization),
            header=lambda canv: draw_header(canv, 'STUDENT ATTENDANCE REPORT', month_label, organization, logo),
        )
        width = document.body_width

        details = details_table([
            ('Student Name', request.name),
            ('Student ID', request.student_id),
            ("Father's Name", display(request.father_name)),
            ('Roll No.', display(request.roll_number)),
            ('Class', request.class_name),
            ('Section', display(request.section)),
            ('Month', month_label),
        ], width - 32 * mm, columns=2)
        profile = Table([[photo_or_placeholder(photo, 26 * mm, 32 * mm), details]],
                        colWidths=[32 * mm, width - 32 * mm])
        profile.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ]))

        summary = summarize(request.attendance, request.month)
        cards = stat_cards([
            ('Present', summary.present, STATUS_BY_NAME['present'].color),
            ('Absent', summary.absent, STATUS_BY_NAME['absent'].color),
            ('Late', summary.late, STATUS_BY_NAME['late'].color),
            ('Excused', summary.excused, STATUS_BY_NAME['excused'].color),
        ], width - 34 * mm)
        stats_row = Table([[cards, percentage_badge(summary.percentage)]],
                          colWidths=[width - 32 * mm, 32 * mm])
        stats_row.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('ALIGN', (1, 0), (1, 0), 'CENTER'),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ]))

        grid = build_calendar_grid(request.month, request.attendance)
        rows = [[f'{cell.day}\n{cell.symbol}' if cell else '' for cell in week] for week in grid]

        def cell_style(row_index, col_index, value):
            cell = grid[row_index][col_index]
            if cell is None:
                return CellStyle(background=LIGHT_GRAY)
            if cell.status is None:
                return CellStyle(GRAY)
            return CellStyle(status_color(cell.status), True)

        calendar_table = render_table(list(WEEKDAY_HEADERS), rows, [ColumnRule(1, 'CENTER')] * 7, width,
                                      cell_style, font_size=9, banded=False)

        threshold = Config.ATTENDANCE_WARNING_THRESHOLD
        standing = "good standing" if summary.percentage >= threshold else f"below required {threshold}%"
        marked_note = (f'{summary.total_marked} marked day(s) this month; '
                       f'attendance {summary.percentage}% '
                       f'({standing}).')
        story = [
            profile,
            Spacer(1, 5 * mm),
            stats_row,
            Spacer(1, 6 * mm),
            calendar_table,
            Spacer(1, 3 * mm),
            build_legend(width),
            Spacer(1, 2 * mm),
            Paragraph(marked_note, SMALL_STYLE),
        ]
        pdf_bytes = document.build(story)
        filename = build_filename(KIND, request.name, month_label)
        logger.info("Generated attendance report %s", filename)
        return GeneratedArtifact(KIND, filename, pdf_bytes, document.page_count)
