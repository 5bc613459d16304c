"""
Sorting helper utilities for the Suffah school document pipeline
Provides consistent ordering and roll-number assignment for class-wide documents
"""

import re


class SortingHelpers:
    """Helper class for sorting operations"""

    @staticmethod
    def get_student_sort_key(student):
        """
        Get sort key for a student record based on its student id
        Numeric part first (so STU-2 sorts before STU-10), then the raw id, then the name
        """
        student_id = str(getattr(student, 'student_id', '') or '').upper()

        # Extract numeric part for proper sorting
        numeric_match = re.search(r'(\d+)', student_id)
        if numeric_match:
            numeric_part = int(numeric_match.group(1))
        else:
            numeric_part = 999999  # Put non-numeric at end

        name = str(getattr(student, 'name', '') or '').upper()
        return (numeric_part, student_id, name)

    @staticmethod
    def get_time_slot_sort_key(slot):
        """Sort (start, end) 'HH:MM' pairs chronologically"""
        start, end = slot
        return (start, end)

    @staticmethod
    def sort_students(students):
        """Sort students using the standard sorting logic"""
        return sorted(students, key=SortingHelpers.get_student_sort_key)

    @staticmethod
    def assign_roll_numbers(students):
        """Sort students and pair each with its roll number.

        An explicit roll_number on the record wins; otherwise the position in
        the sorted list (1-based) is used, moved past any number already in
        use so rolls never repeat. Returns a list of (roll, student).
        """
        ordered = SortingHelpers.sort_students(students)
        used = {str(student.roll_number) for student in ordered if getattr(student, 'roll_number', None)}
        assigned = []
        for index, student in enumerate(ordered, 1):
            roll = getattr(student, 'roll_number', None)
            if not roll:
                while str(index) in used:
                    index += 1
                roll = str(index)
                used.add(roll)
            assigned.append((str(roll), student))
        return assigned
