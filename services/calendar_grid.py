"""
Calendar grid builder for the Suffah school document pipeline
Month day lists, status symbols, per-student counts and the 7-column month grid
"""

import calendar
from collections import namedtuple
from datetime import date

from services.pdf_layout import STATUS_BY_NAME, UNMARKED_SYMBOL
from utils.grading import attendance_percentage

WEEKDAY_HEADERS = ('Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat')

CalendarCell = namedtuple('CalendarCell', ['day', 'status', 'symbol'])


class AttendanceSummary:
    """Per-status day counts for one student in one month"""

    def __init__(self, present=0, absent=0, late=0, excused=0, other=0):
        self.present = present
        self.absent = absent
        self.late = late
        self.excused = excused
        # Days marked with a status outside P/A/L/E still count as marked
        self.other = other

    @property
    def total_marked(self):
        return self.present + self.absent + self.late + self.excused + self.other

    @property
    def percentage(self):
        return attendance_percentage(self.present, self.absent, self.late, self.excused, self.other)

    def __eq__(self, other):
        if not isinstance(other, AttendanceSummary):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def as_tuple(self):
        return (self.present, self.absent, self.late, self.excused, self.other)

    def __repr__(self):
        return (f'<AttendanceSummary P={self.present} A={self.absent} L={self.late} '
                f'E={self.excused} other={self.other} {self.percentage}%>')


def days_in_month(month):
    return calendar.monthrange(month.year, month.month)[1]


def month_days(month):
    """Every date of the month containing `month`"""
    return [date(month.year, month.month, day) for day in range(1, days_in_month(month) + 1)]


def first_weekday_offset(month):
    """Column of day 1 in a Sunday-first week (0 = Sunday)"""
    return (date(month.year, month.month, 1).weekday() + 1) % 7


def status_symbol(status):
    """P/A/L/E for known statuses, '-' for unmarked or unknown"""
    item = STATUS_BY_NAME.get(str(status or '').lower())
    return item.symbol if item is not None else UNMARKED_SYMBOL


def index_by_date(records, month=None):
    """{date: status} for the records, limited to `month` when given"""
    indexed = {}
    for record in records:
        if month is not None and (record.date.year, record.date.month) != (month.year, month.month):
            continue
        indexed[record.date] = record.status
    return indexed


def summarize(records, month=None):
    """Count statuses over the month's records"""
    summary = AttendanceSummary()
    for status in index_by_date(records, month).values():
        if status in STATUS_BY_NAME:
            setattr(summary, status, getattr(summary, status) + 1)
        else:
            summary.other += 1
    return summary


def register_symbols(month, records):
    """One symbol per day of the month for a register row"""
    indexed = index_by_date(records, month)
    return [status_symbol(indexed.get(day)) if day in indexed else UNMARKED_SYMBOL
            for day in month_days(month)]


def build_calendar_grid(month, records):
    """Weeks of 7 cells (Sunday first); padding cells are None"""
    indexed = index_by_date(records, month)
    cells = [None] * first_weekday_offset(month)
    for day in month_days(month):
        status = indexed.get(day)
        cells.append(CalendarCell(day.day, status, status_symbol(status)))
    while len(cells) % 7:
        cells.append(None)
    return [cells[start:start + 7] for start in range(0, len(cells), 7)]
