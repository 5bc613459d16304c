"""
Fee view records for the Suffah school document pipeline
Invoices, receipts and fee reports
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from models.base import ViewRecord
from models.errors import InvalidDocumentRequest
from utils.validators import validate_fee_status, validate_non_negative


def _check_amounts(record, names):
    for name in names:
        value = getattr(record, name)
        if value is None:
            continue
        is_valid, message = validate_non_negative(value, name)
        if not is_valid:
            raise InvalidDocumentRequest(record.KIND, name, message)


def _check_status(record):
    if record.status is None:
        return
    status = str(record.status).strip().lower()
    is_valid, message = validate_fee_status(status)
    if not is_valid:
        raise InvalidDocumentRequest(record.KIND, 'status', message)
    object.__setattr__(record, 'status', status)


def derive_fee_status(final_amount, paid_amount, due_date=None, as_of=None):
    """paid / partial / overdue / pending from the amounts and due date"""
    if paid_amount >= final_amount:
        return 'paid'
    if paid_amount > 0:
        return 'partial'
    if due_date is not None and as_of is not None and due_date < as_of:
        return 'overdue'
    return 'pending'


@dataclass(frozen=True)
class FeeLineItem(ViewRecord):
    """One charge on an invoice"""

    KIND = 'Fee item'
    REQUIRED = ('description', 'amount')

    description: str
    amount: float

    def validate(self):
        _check_amounts(self, ('amount',))


@dataclass(frozen=True)
class Payment(ViewRecord):
    """A payment made against an invoice"""

    KIND = 'Payment'
    REQUIRED = ('amount', 'paid_on')
    DATES = ('paid_on',)

    amount: float
    paid_on: date
    method: Optional[str] = None
    reference: Optional[str] = None

    def validate(self):
        _check_amounts(self, ('amount',))


@dataclass(frozen=True)
class InvoiceData(ViewRecord):
    """Fee invoice for one student"""

    KIND = 'Invoice'
    REQUIRED = ('invoice_number', 'student_id', 'student_name', 'class_name', 'items')
    NESTED = {'items': FeeLineItem, 'payments': Payment}
    DATES = ('issue_date', 'due_date')

    invoice_number: str
    student_id: str
    student_name: str
    class_name: str
    items: Tuple[FeeLineItem, ...]
    father_name: Optional[str] = None
    section: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    fee_period: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    discount: float = 0
    paid_amount: Optional[float] = None
    payments: Tuple[Payment, ...] = ()
    status: Optional[str] = None
    notes: Optional[str] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None

    def validate(self):
        _check_amounts(self, ('discount', 'paid_amount'))
        _check_status(self)

    @property
    def subtotal(self):
        return sum(item.amount for item in self.items)

    @property
    def final_amount(self):
        return max(0, self.subtotal - (self.discount or 0))

    @property
    def total_paid(self):
        """Explicit paid amount, else the sum of recorded payments"""
        if self.paid_amount is not None:
            return self.paid_amount
        return sum(payment.amount for payment in self.payments)

    @property
    def balance(self):
        return max(0, self.final_amount - self.total_paid)

    def resolved_status(self, as_of=None):
        """Stored status, or one derived from the amounts"""
        if self.status:
            return self.status
        return derive_fee_status(self.final_amount, self.total_paid, self.due_date, as_of)


@dataclass(frozen=True)
class ReceiptData(ViewRecord):
    """Payment receipt"""

    KIND = 'Receipt'
    REQUIRED = ('receipt_number', 'student_id', 'student_name', 'class_name', 'amount', 'paid_on')
    DATES = ('paid_on',)

    receipt_number: str
    student_id: str
    student_name: str
    class_name: str
    amount: float
    paid_on: date
    father_name: Optional[str] = None
    section: Optional[str] = None
    description: Optional[str] = None
    method: Optional[str] = None
    reference: Optional[str] = None
    invoice_number: Optional[str] = None
    balance_after: Optional[float] = None
    received_by: Optional[str] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None

    def validate(self):
        _check_amounts(self, ('amount', 'balance_after'))


@dataclass(frozen=True)
class FeeReportEntry(ViewRecord):
    """One student's fee position in a class fee report"""

    KIND = 'Fee report entry'
    REQUIRED = ('student_id', 'name', 'assigned')

    student_id: str
    name: str
    assigned: float
    paid: float = 0
    discount: float = 0
    father_name: Optional[str] = None
    roll_number: Optional[str] = None
    status: Optional[str] = None

    def validate(self):
        _check_amounts(self, ('assigned', 'paid', 'discount'))
        _check_status(self)

    @property
    def balance(self):
        return max(0, self.assigned - self.discount - self.paid)

    def resolved_status(self):
        if self.status:
            return self.status
        return derive_fee_status(max(0, self.assigned - self.discount), self.paid)


@dataclass(frozen=True)
class ClassFeeReportRequest(ViewRecord):
    """Fee collection report for a class"""

    KIND = 'Fee report'
    REQUIRED = ('class_name', 'entries')
    NESTED = {'entries': FeeReportEntry}

    class_name: str
    entries: Tuple[FeeReportEntry, ...]
    period: Optional[str] = None
    section: Optional[str] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None


@dataclass(frozen=True)
class FeeStatementLine(ViewRecord):
    """One fee charge in a student's fee statement"""

    KIND = 'Fee statement line'
    REQUIRED = ('description', 'amount')
    DATES = ('due_date',)

    description: str
    amount: float
    discount: float = 0
    paid: float = 0
    due_date: Optional[date] = None
    status: Optional[str] = None

    def validate(self):
        _check_amounts(self, ('amount', 'discount', 'paid'))
        _check_status(self)

    @property
    def balance(self):
        return max(0, self.amount - self.discount - self.paid)

    def resolved_status(self, as_of=None):
        if self.status:
            return self.status
        return derive_fee_status(max(0, self.amount - self.discount), self.paid, self.due_date, as_of)


@dataclass(frozen=True)
class IndividualFeeReportRequest(ViewRecord):
    """Fee statement for one student"""

    KIND = 'Fee report'
    REQUIRED = ('student_id', 'name', 'class_name', 'lines')
    NESTED = {'lines': FeeStatementLine, 'payments': Payment}

    student_id: str
    name: str
    class_name: str
    lines: Tuple[FeeStatementLine, ...]
    payments: Tuple[Payment, ...] = ()
    father_name: Optional[str] = None
    section: Optional[str] = None
    period: Optional[str] = None
    photo_url: Optional[str] = None
    school_name: Optional[str] = None
    school_address: Optional[str] = None
