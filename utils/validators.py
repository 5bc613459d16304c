"""
Validation utilities for the Suffah school document pipeline
"""

from datetime import datetime, date

ATTENDANCE_STATUSES = ('present', 'absent', 'late', 'excused')
FEE_STATUSES = ('paid', 'partial', 'pending', 'overdue')


def is_blank(value):
    """True for None and whitespace-only strings"""
    if value is None:
        return True
    if isinstance(value, str) and len(value.strip()) == 0:
        return True
    return False


def validate_required(value, field_name):
    """Validate that a required field is present"""
    if is_blank(value):
        return False, f"missing required field '{field_name}'"
    return True, f"Valid {field_name}"


def validate_non_negative(value, field_name):
    """Validate a numeric amount that cannot be negative"""
    try:
        number = float(value)
    except (ValueError, TypeError):
        return False, f"field '{field_name}' must be a number"
    if number < 0:
        return False, f"field '{field_name}' cannot be negative"
    return True, f"Valid {field_name}"


def validate_marks(marks, max_marks):
    """Validate marks against maximum marks"""
    try:
        marks_float = float(marks)
        max_marks_float = float(max_marks)

        if marks_float < 0:
            return False, "Marks cannot be negative"

        if max_marks_float > 0 and marks_float > max_marks_float:
            return False, f"Marks cannot exceed maximum marks ({max_marks_float:g})"

        return True, "Valid marks"
    except (ValueError, TypeError):
        return False, "Marks must be a valid number"


def validate_attendance_status(status):
    """Validate attendance status (case-insensitive)"""
    if is_blank(status):
        return False, "Attendance status is required"
    if str(status).strip().lower() not in ATTENDANCE_STATUSES:
        return False, f"Attendance status must be one of: {', '.join(ATTENDANCE_STATUSES)}"
    return True, "Valid attendance status"


def validate_fee_status(status):
    """Validate an invoice/fee status"""
    if status not in FEE_STATUSES:
        return False, f"Fee status must be one of: {', '.join(FEE_STATUSES)}"
    return True, "Valid fee status"


def validate_date(date_str):
    """Validate date format"""
    try:
        if isinstance(date_str, str):
            datetime.strptime(date_str[:10], '%Y-%m-%d')
        elif isinstance(date_str, date):
            pass  # Already a date object
        else:
            return False, "Invalid date format"

        return True, "Valid date"
    except ValueError:
        return False, "Date must be in YYYY-MM-DD format"


def validate_time(time_str):
    """Validate a 24-hour HH:MM time string"""
    try:
        datetime.strptime(str(time_str).strip()[:5], '%H:%M')
        return True, "Valid time"
    except ValueError:
        return False, "Time must be in HH:MM format"
