"""
Unit tests for the PDF layout primitives
"""

import unittest

from reportlab.platypus import Paragraph

from config import Config
from models.errors import GenerationError
from models.fees import InvoiceData
from services.pdf_layout import (
    DANGER, GOOD, GRAY, LANDSCAPE, STATUS_BY_SYMBOL, WARNING, BODY_STYLE, ColumnRule, PaginatedDocument,
    attendance_cell_style, build_filename, build_legend, calc_colwidths_from_fracs, class_label,
    collection_rate_cell_style, column_styler, fee_status_cell_style, legend_entries, pass_fail_cell_style,
    percentage_cell_style, render_table, resolve_organization
)


class TestNaming(unittest.TestCase):

    def test_build_filename(self):
        self.assertEqual(build_filename('StudentCard', 'Ali Khan', 'STU-001'), 'StudentCard-Ali-Khan-STU-001.pdf')
        self.assertEqual(build_filename('Attendance', 'Class 5 - A', 'March 2024'),
                         'Attendance-Class-5-A-March-2024.pdf')

    def test_build_filename_drops_unsafe_and_empty_parts(self):
        self.assertEqual(build_filename('Results', 'Class 9/10', None), 'Results-Class-910.pdf')
        self.assertEqual(build_filename('Results', 'Class 9', '  '), 'Results-Class-9.pdf')

    def test_class_label(self):
        self.assertEqual(class_label('Class 5', 'A'), 'Class 5 - A')
        self.assertEqual(class_label('Class 5'), 'Class 5')

    def test_resolve_organization_defaults(self):
        organization = resolve_organization(None)
        self.assertEqual(organization.name, Config.SCHOOL_NAME)
        self.assertEqual(organization.address, Config.SCHOOL_ADDRESS)

    def test_resolve_organization_record_override(self):
        invoice = InvoiceData(invoice_number='1', student_id='S1', student_name='Ali', class_name='5',
                              items=({'description': 'Tuition', 'amount': 100},), school_name='Branch Campus')
        self.assertEqual(resolve_organization(invoice).name, 'Branch Campus')


class TestCellStylers(unittest.TestCase):

    def test_attendance_symbols_use_status_table(self):
        for symbol, item in STATUS_BY_SYMBOL.items():
            style = attendance_cell_style(symbol)
            self.assertIs(style.text_color, item.color)
            self.assertTrue(style.bold)
        self.assertIs(attendance_cell_style('-').text_color, GRAY)

    def test_legend_matches_cell_colors(self):
        for symbol, _, color in legend_entries():
            self.assertIs(attendance_cell_style(symbol).text_color, color)

    def test_percentage_thresholds(self):
        self.assertIs(percentage_cell_style('90%').text_color, GOOD)
        self.assertIs(percentage_cell_style('75%').text_color, WARNING)
        self.assertIs(percentage_cell_style('74.9%').text_color, DANGER)
        self.assertIsNone(percentage_cell_style('-'))

    def test_collection_rate_thresholds(self):
        self.assertIs(collection_rate_cell_style('90.0%').text_color, GOOD)
        self.assertIs(collection_rate_cell_style('70%').text_color, WARNING)
        self.assertIs(collection_rate_cell_style('69.9%').text_color, DANGER)

    def test_pass_fail(self):
        self.assertIs(pass_fail_cell_style('PASS').text_color, GOOD)
        self.assertIs(pass_fail_cell_style('fail').text_color, DANGER)
        self.assertIsNone(pass_fail_cell_style('ABSENT'))

    def test_fee_status(self):
        self.assertIsNotNone(fee_status_cell_style('Overdue'))
        self.assertIsNone(fee_status_cell_style('waived'))

    def test_column_styler_only_styles_named_columns(self):
        style = column_styler({2: pass_fail_cell_style})
        self.assertIsNone(style(0, 1, 'PASS'))
        self.assertIs(style(0, 2, 'PASS').text_color, GOOD)


class TestTables(unittest.TestCase):

    def test_colwidths_are_normalised(self):
        widths = calc_colwidths_from_fracs(200, [1, 3])
        self.assertEqual(widths, [50, 150])

    def test_rule_count_must_match_headers(self):
        with self.assertRaises(GenerationError):
            render_table(['A', 'B'], [], [ColumnRule(1)], 100)

    def test_header_only_table(self):
        table = render_table(['A', 'B'], [], [ColumnRule(1), ColumnRule(1)], 100)
        self.assertEqual(len(table._cellvalues), 1)

    def test_cell_style_called_per_body_cell(self):
        seen = []

        def style(row_index, col_index, value):
            seen.append((row_index, col_index, value))
            return None

        render_table(['A', 'B'], [['1', '2'], ['3', '4']], [ColumnRule(1), ColumnRule(1, 'CENTER', False)], 100,
                     style)
        self.assertEqual(seen, [(0, 0, '1'), (0, 1, '2'), (1, 0, '3'), (1, 1, '4')])

    def test_legend_includes_trailing_text(self):
        legend = build_legend(500, trailing_text='Total Students: 3')
        self.assertEqual(legend._cellvalues[0][-1], 'Total Students: 3')


class TestPaginatedDocument(unittest.TestCase):

    def test_every_page_is_stamped_with_total(self):
        stamps = []
        document = PaginatedDocument('Test', pagesize=LANDSCAPE,
                                     page_stamp=lambda canv, index, count: stamps.append((index, count)),
                                     header=lambda canv: None)
        rows = [[str(i), f'Student {i}'] for i in range(120)]
        story = [render_table(['#', 'Name'], rows, [ColumnRule(1), ColumnRule(4)], document.body_width)]
        pdf_bytes = document.build(story)
        self.assertTrue(pdf_bytes.startswith(b'%PDF'))
        self.assertGreater(document.page_count, 1)
        self.assertEqual(stamps, [(index, document.page_count) for index in range(document.page_count)])

    def test_invariant_output(self):
        def build():
            document = PaginatedDocument('Test')
            return document.build([Paragraph('Hello', BODY_STYLE)])
        self.assertEqual(build(), build())

    def test_direct_canvas_pages_are_counted(self):
        document = PaginatedDocument('Cards')
        canv = document.open_canvas()
        canv.drawString(10, 10, 'front')
        canv.showPage()
        canv.drawString(10, 10, 'back')
        canv.showPage()
        document.finish()
        self.assertEqual(document.page_count, 2)

    def test_layout_failure_becomes_generation_error(self):
        document = PaginatedDocument('Broken')
        with self.assertRaises(GenerationError):
            document.build([object()])


if __name__ == '__main__':
    unittest.main()
