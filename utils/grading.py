"""
Grading and attendance arithmetic for the Suffah school document pipeline
"""

from config import Config
from utils.formatters import round_half_up

GRADE_THRESHOLDS = (
    (90, 'A+'),
    (80, 'A'),
    (70, 'B+'),
    (60, 'B'),
    (50, 'C+'),
    (40, 'C'),
)
FAIL_GRADE = 'F'


def marks_percentage(obtained, total):
    """Percentage of marks; 0 when the total is 0"""
    total = float(total or 0)
    if total <= 0:
        return 0.0
    return float(obtained or 0) / total * 100


def grade_for_percentage(percentage):
    """Letter grade from the threshold table"""
    for threshold, grade in GRADE_THRESHOLDS:
        if percentage >= threshold:
            return grade
    return FAIL_GRADE


def is_pass(percentage, pass_percentage=Config.PASS_PERCENTAGE):
    return percentage >= pass_percentage


def attendance_percentage(present, absent, late, excused, other=0):
    """Present days over marked days, rounded half up; 0 when nothing is marked"""
    marked = present + absent + late + excused + other
    if marked == 0:
        return 0
    return round_half_up(present * 100 / marked)


def collection_rate(collected, assigned):
    """Collected over assigned as a percentage; 0 when nothing was assigned"""
    assigned = float(assigned or 0)
    if assigned <= 0:
        return 0.0
    return float(collected or 0) / assigned * 100
