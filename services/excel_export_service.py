"""
Excel export service for the Suffah school document pipeline
Spreadsheet counterparts of the tabular PDF documents
"""

import logging
from io import BytesIO

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from models.errors import GenerationError
from services.calendar_grid import month_days, register_symbols, summarize
from services.pdf_layout import build_filename, class_label, resolve_organization
from utils.formatters import display
from utils.grading import collection_rate, grade_for_percentage, is_pass, marks_percentage
from utils.sorting_helpers import SortingHelpers

logger = logging.getLogger(__name__)

SYMBOL_FILLS = {
    'P': 'C6EFCE',
    'A': 'FFC7CE',
    'L': 'FFEB9C',
    'E': 'DDEBF7',
}


class ExcelExportService:
    """Service for exporting class documents to Excel"""

    @staticmethod
    def create_workbook():
        """Create a new workbook with default styling"""
        return openpyxl.Workbook()

    @staticmethod
    def style_header_row(ws, row_num, columns):
        """Apply styling to header row"""
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="000000", end_color="000000", fill_type="solid")
        header_alignment = Alignment(horizontal="center", vertical="center")

        for col_num, header in enumerate(columns, 1):
            cell = ws.cell(row=row_num, column=col_num, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = header_alignment

    @staticmethod
    def write_title(ws, title, subtitle, organization):
        """School name, document title and subtitle above the table; returns the next free row"""
        ws.cell(row=1, column=1, value=organization.name).font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value=title).font = Font(bold=True, size=12)
        ws.cell(row=3, column=1, value=subtitle)
        return 5

    @staticmethod
    def auto_adjust_columns(ws, min_row=1):
        """Auto-adjust column widths"""
        for column in ws.iter_cols(min_row=min_row):
            max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
            ws.column_dimensions[get_column_letter(column[0].column)].width = min(max_length + 2, 50)

    @staticmethod
    def format_number(value):
        """Format number: whole numbers without decimals, fractional numbers with 2 decimal places."""
        if value is None:
            return None
        try:
            num = float(value)
        except (ValueError, TypeError):
            return value
        return int(num) if num == int(num) else round(num, 2)

    @staticmethod
    def set_number(cell, value, align_right=False):
        """Set an integer/float number with alignment preferences."""
        cell.value = ExcelExportService.format_number(value)
        cell.alignment = Alignment(horizontal=("right" if align_right else "left"), vertical="center")
        return cell

    @staticmethod
    def set_percentage(cell, percent_0_to_100, align_left=True):
        """Write a numeric percentage (avoid text with green triangle)."""
        if percent_0_to_100 is None:
            cell.value = None
        else:
            cell.value = float(percent_0_to_100) / 100.0
            cell.number_format = '0%' if percent_0_to_100 == int(percent_0_to_100) else '0.00%'
        cell.alignment = Alignment(horizontal=("left" if align_left else "right"), vertical="center")
        return cell

    @staticmethod
    def _finish(ws, header_row):
        ws.freeze_panes = ws.cell(row=header_row + 1, column=1)
        ExcelExportService.auto_adjust_columns(ws, min_row=header_row)

    @staticmethod
    def export_attendance_register(request):
        """Monthly register: one row per student, one column per day, then the totals"""
        wb = ExcelExportService.create_workbook()
        ws = wb.active
        ws.title = request.month.strftime('%b %Y')
        subtitle = f'{class_label(request.class_name, request.section)}  |  {request.month.strftime("%B %Y")}'
        row = ExcelExportService.write_title(ws, 'Monthly Attendance Register', subtitle,
                                             resolve_organization(request))

        days = month_days(request.month)
        headers = (['#', 'Roll No.', 'Student Name', 'Father Name'] + [str(day.day) for day in days]
                   + ['P', 'A', 'L', 'E', '%'])
        ExcelExportService.style_header_row(ws, row, headers)
        header_row = row

        for index, student in enumerate(request.students, 1):
            row += 1
            summary = summarize(student.attendance, request.month)
            ws.cell(row=row, column=1, value=index)
            ws.cell(row=row, column=2, value=display(student.roll_number))
            ws.cell(row=row, column=3, value=student.name)
            ws.cell(row=row, column=4, value=display(student.father_name))
            for offset, symbol in enumerate(register_symbols(request.month, student.attendance)):
                cell = ws.cell(row=row, column=5 + offset, value=symbol)
                cell.alignment = Alignment(horizontal="center")
                if symbol in SYMBOL_FILLS:
                    cell.fill = PatternFill(start_color=SYMBOL_FILLS[symbol], end_color=SYMBOL_FILLS[symbol],
                                            fill_type="solid")
            column = 5 + len(days)
            for value in (summary.present, summary.absent, summary.late, summary.excused):
                ExcelExportService.set_number(ws.cell(row=row, column=column), value, align_right=True)
                column += 1
            ExcelExportService.set_percentage(ws.cell(row=row, column=column), summary.percentage)

        ws.cell(row=row + 2, column=1, value=f'Total Students: {len(request.students)}').font = Font(bold=True)
        ExcelExportService._finish(ws, header_row)
        logger.info("Exported attendance register for %s (%d students)", subtitle, len(request.students))
        return wb

    @staticmethod
    def export_class_results(request):
        """Result sheet with percentage, grade and pass/fail per student"""
        wb = ExcelExportService.create_workbook()
        ws = wb.active
        ws.title = "Results"
        label = class_label(request.class_name, request.section)
        row = ExcelExportService.write_title(ws, 'Class Result Sheet', f'{request.exam_name}  |  {label}',
                                             resolve_organization(request))
        headers = ['Roll No.', 'Student ID', 'Name', 'Father Name', 'Obtained', 'Total', 'Percentage', 'Grade',
                   'Status']
        ExcelExportService.style_header_row(ws, row, headers)
        header_row = row

        passed = 0
        for roll_number, result in SortingHelpers.assign_roll_numbers(request.results):
            row += 1
            percentage = marks_percentage(result.marks_obtained, result.total_marks)
            status = 'PASS' if is_pass(percentage) else 'FAIL'
            passed += status == 'PASS'
            ws.cell(row=row, column=1, value=roll_number)
            ws.cell(row=row, column=2, value=result.student_id)
            ws.cell(row=row, column=3, value=result.name)
            ws.cell(row=row, column=4, value=display(result.father_name))
            ExcelExportService.set_number(ws.cell(row=row, column=5), result.marks_obtained, align_right=True)
            ExcelExportService.set_number(ws.cell(row=row, column=6), result.total_marks, align_right=True)
            ExcelExportService.set_percentage(ws.cell(row=row, column=7), round(percentage, 2))
            ws.cell(row=row, column=8, value=result.grade or grade_for_percentage(percentage))
            status_cell = ws.cell(row=row, column=9, value=status)
            status_cell.font = Font(bold=True, color="228B22" if status == 'PASS' else "DC3545")

        total = len(request.results)
        ws.cell(row=row + 2, column=1, value=f'Total: {total}  Pass: {passed}  Fail: {total - passed}')
        ExcelExportService._finish(ws, header_row)
        return wb

    @staticmethod
    def export_award_list(award_list):
        """Subject award list with theory, practical and total marks"""
        wb = ExcelExportService.create_workbook()
        ws = wb.active
        ws.title = "Award List"
        subtitle = f'{award_list.subject}  |  {class_label(award_list.class_name, award_list.section)}'
        row = ExcelExportService.write_title(ws, 'Award List', subtitle, resolve_organization(award_list))
        headers = ['Sr.No', 'Student ID', 'Student Name', 'Father Name', 'Theory', 'Practical', 'Total']
        ExcelExportService.style_header_row(ws, row, headers)
        header_row = row

        for index, (_, entry) in enumerate(SortingHelpers.assign_roll_numbers(award_list.entries), 1):
            row += 1
            ws.cell(row=row, column=1, value=index)
            ws.cell(row=row, column=2, value=entry.student_id)
            ws.cell(row=row, column=3, value=entry.name)
            ws.cell(row=row, column=4, value=display(entry.father_name))
            ExcelExportService.set_number(ws.cell(row=row, column=5), entry.theory, align_right=True)
            ExcelExportService.set_number(ws.cell(row=row, column=6), entry.practical, align_right=True)
            ExcelExportService.set_number(ws.cell(row=row, column=7), entry.computed_total, align_right=True)
        ExcelExportService._finish(ws, header_row)
        return wb

    @staticmethod
    def export_student_list(request):
        """Class list ordered by student id"""
        wb = ExcelExportService.create_workbook()
        ws = wb.active
        ws.title = "Students"
        row = ExcelExportService.write_title(ws, 'Student List', class_label(request.class_name, request.section),
                                             resolve_organization(request))
        headers = ['Roll No.', 'Student ID', 'Name', 'Father Name', 'Address', 'Phone']
        ExcelExportService.style_header_row(ws, row, headers)
        header_row = row

        for roll_number, student in SortingHelpers.assign_roll_numbers(request.students):
            row += 1
            values = [roll_number, student.student_id, student.name, display(student.father_name),
                      display(student.address), display(student.phone)]
            for column, value in enumerate(values, 1):
                ws.cell(row=row, column=column, value=value)
        ExcelExportService._finish(ws, header_row)
        return wb

    @staticmethod
    def export_class_fee_report(request):
        """Fee collection per student with the class collection rate"""
        wb = ExcelExportService.create_workbook()
        ws = wb.active
        ws.title = "Fee Report"
        label = class_label(request.class_name, request.section)
        subtitle = label + (f'  |  {request.period}' if request.period else '')
        row = ExcelExportService.write_title(ws, 'Fee Collection Report', subtitle, resolve_organization(request))
        headers = ['Roll No.', 'Student ID', 'Name', 'Assigned', 'Discount', 'Paid', 'Balance', 'Paid %', 'Status']
        ExcelExportService.style_header_row(ws, row, headers)
        header_row = row

        net_total = 0
        collected = 0
        for roll_number, entry in SortingHelpers.assign_roll_numbers(request.entries):
            row += 1
            net = max(0, entry.assigned - entry.discount)
            net_total += net
            collected += entry.paid
            ws.cell(row=row, column=1, value=roll_number)
            ws.cell(row=row, column=2, value=entry.student_id)
            ws.cell(row=row, column=3, value=entry.name)
            for column, value in ((4, entry.assigned), (5, entry.discount), (6, entry.paid), (7, entry.balance)):
                ExcelExportService.set_number(ws.cell(row=row, column=column), value, align_right=True)
            ExcelExportService.set_percentage(ws.cell(row=row, column=8), round(collection_rate(entry.paid, net), 2))
            ws.cell(row=row, column=9, value=entry.resolved_status().capitalize())

        ws.cell(row=row + 2, column=1, value='Collection Rate').font = Font(bold=True)
        ExcelExportService.set_percentage(ws.cell(row=row + 2, column=2), round(collection_rate(collected, net_total), 2))
        ExcelExportService._finish(ws, header_row)
        return wb

    @staticmethod
    def workbook_to_bytes(workbook):
        """Convert workbook to bytes for download"""
        output = BytesIO()
        try:
            workbook.save(output)
        except Exception as e:
            logger.error("Error converting workbook to bytes: %s", e, exc_info=True)
            raise GenerationError('Workbook', str(e)) from e
        return output.getvalue()

    @staticmethod
    def filename_for(kind, entity, qualifier=None):
        """Same naming as the PDF documents, with an .xlsx extension"""
        return build_filename(kind, entity, qualifier)[:-len('.pdf')] + '.xlsx'
