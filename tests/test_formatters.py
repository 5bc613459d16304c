"""
Unit tests for formatting, grading and sorting helpers
"""

import unittest
from datetime import date

from models.student import StudentEntry
from utils.formatters import (
    date_to_words, display, format_amount, format_date, format_number, format_time, initials, marks_to_words,
    number_to_words, round_half_up
)
from utils.grading import attendance_percentage, collection_rate, grade_for_percentage, is_pass, marks_percentage
from utils.sorting_helpers import SortingHelpers
from utils.validators import validate_attendance_status, validate_marks, validate_required


class TestFormatters(unittest.TestCase):

    def test_round_half_up(self):
        self.assertEqual(round_half_up(72.5), 73)
        self.assertEqual(round_half_up(72.4999), 72)
        self.assertEqual(round_half_up(0.5), 1)

    def test_format_number(self):
        self.assertEqual(format_number(32.0), 32)
        self.assertEqual(format_number(32.43), 32.43)
        self.assertIsNone(format_number(None))

    def test_number_to_words(self):
        self.assertEqual(number_to_words(0), 'Zero')
        self.assertEqual(number_to_words(15), 'Fifteen')
        self.assertEqual(number_to_words(85), 'Eighty Five')
        self.assertEqual(number_to_words(100), 'One Hundred')
        self.assertEqual(number_to_words(2010), 'Two Thousand Ten')
        self.assertEqual(number_to_words(12500), 'Twelve Thousand Five Hundred')

    def test_marks_to_words(self):
        self.assertEqual(marks_to_words(42), 'Forty Two')
        self.assertEqual(marks_to_words(42.5), 'Forty Two Point Five')

    def test_date_to_words(self):
        self.assertEqual(date_to_words(date(2010, 3, 15)), 'Fifteenth March Two Thousand Ten')
        self.assertEqual(date_to_words(None), '-')

    def test_format_date(self):
        self.assertEqual(format_date(date(2024, 3, 5)), '05/03/2024')
        self.assertEqual(format_date(None), '-')

    def test_format_time(self):
        self.assertEqual(format_time('13:05'), '1:05 PM')
        self.assertEqual(format_time('00:15'), '12:15 AM')
        self.assertEqual(format_time('12:00'), '12:00 PM')
        self.assertEqual(format_time(None), '-')

    def test_format_amount(self):
        self.assertEqual(format_amount(12500), 'PKR 12,500')
        self.assertEqual(format_amount(99.5, ''), '99.50')

    def test_display_placeholder(self):
        self.assertEqual(display(None), '-')
        self.assertEqual(display('  '), '-')
        self.assertEqual(display(None, 'N/A'), 'N/A')
        self.assertEqual(display(' O+ '), 'O+')

    def test_initials(self):
        self.assertEqual(initials('The Suffah Public School'), 'SP')


class TestGrading(unittest.TestCase):

    def test_grade_thresholds_are_inclusive(self):
        self.assertEqual(grade_for_percentage(90.0), 'A+')
        self.assertEqual(grade_for_percentage(89.999), 'A')
        self.assertEqual(grade_for_percentage(40), 'C')
        self.assertEqual(grade_for_percentage(39.9), 'F')

    def test_pass_mark(self):
        self.assertTrue(is_pass(40))
        self.assertFalse(is_pass(39.99))

    def test_marks_percentage_zero_total(self):
        self.assertEqual(marks_percentage(10, 0), 0.0)
        self.assertAlmostEqual(marks_percentage(45, 60), 75.0)

    def test_attendance_percentage(self):
        """20 present and 5 absent out of 25 marked days"""
        self.assertEqual(attendance_percentage(20, 5, 0, 0), 80)
        self.assertEqual(attendance_percentage(0, 0, 0, 0), 0)
        self.assertEqual(attendance_percentage(29, 1, 0, 0), 97)

    def test_attendance_percentage_counts_other_marks(self):
        self.assertEqual(attendance_percentage(3, 0, 0, 0, other=1), 75)

    def test_collection_rate(self):
        self.assertEqual(collection_rate(500, 0), 0.0)
        self.assertAlmostEqual(collection_rate(450, 600), 75.0)


class TestSortingHelpers(unittest.TestCase):

    def _students(self, ids):
        return [StudentEntry(student_id=student_id, name=f'Name {student_id}') for student_id in ids]

    def test_numeric_ids_sort_naturally(self):
        ordered = SortingHelpers.sort_students(self._students(['STU-10', 'STU-2', 'STU-1']))
        self.assertEqual([s.student_id for s in ordered], ['STU-1', 'STU-2', 'STU-10'])

    def test_non_numeric_ids_sort_last(self):
        ordered = SortingHelpers.sort_students(self._students(['ABC', 'STU-3']))
        self.assertEqual([s.student_id for s in ordered], ['STU-3', 'ABC'])

    def test_roll_numbers_independent_of_input_order(self):
        first = SortingHelpers.assign_roll_numbers(self._students(['STU-3', 'STU-1', 'STU-2']))
        second = SortingHelpers.assign_roll_numbers(self._students(['STU-2', 'STU-3', 'STU-1']))
        self.assertEqual([(roll, s.student_id) for roll, s in first],
                         [(roll, s.student_id) for roll, s in second])
        self.assertEqual([roll for roll, _ in first], ['1', '2', '3'])

    def test_explicit_roll_number_wins(self):
        students = [StudentEntry(student_id='STU-1', name='A', roll_number='101'),
                    StudentEntry(student_id='STU-2', name='B')]
        self.assertEqual([roll for roll, _ in SortingHelpers.assign_roll_numbers(students)], ['101', '2'])

    def test_generated_roll_numbers_skip_explicit_ones(self):
        students = [StudentEntry(student_id='STU-1', name='A'),
                    StudentEntry(student_id='STU-2', name='B'),
                    StudentEntry(student_id='STU-3', name='C', roll_number='2')]
        rolls = [roll for roll, _ in SortingHelpers.assign_roll_numbers(students)]
        self.assertEqual(rolls, ['1', '3', '2'])
        self.assertEqual(len(set(rolls)), len(rolls))

    def test_time_slot_sort(self):
        slots = [('10:00', '10:45'), ('08:00', '08:45'), ('09:00', '09:45')]
        self.assertEqual(sorted(slots, key=SortingHelpers.get_time_slot_sort_key)[0], ('08:00', '08:45'))


class TestValidators(unittest.TestCase):

    def test_validate_required(self):
        self.assertFalse(validate_required(None, 'name')[0])
        self.assertFalse(validate_required('', 'name')[0])
        self.assertTrue(validate_required('Ali', 'name')[0])

    def test_validate_marks(self):
        self.assertTrue(validate_marks(40, 50)[0])
        self.assertFalse(validate_marks(60, 50)[0])
        self.assertFalse(validate_marks('abc', 50)[0])

    def test_validate_attendance_status(self):
        self.assertTrue(validate_attendance_status('Present')[0])
        self.assertFalse(validate_attendance_status('holiday')[0])


if __name__ == '__main__':
    unittest.main()
