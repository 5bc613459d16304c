"""
Base view record for the Suffah school document pipeline
View records are immutable snapshots handed to the document generators
"""

from dataclasses import MISSING, asdict, fields
from datetime import date, datetime

from models.errors import InvalidDocumentRequest
from utils.validators import validate_date, validate_required


def coerce_date(value):
    """Turn an ISO string (or datetime) into a date; None stays None"""
    if value is None or (isinstance(value, date) and not isinstance(value, datetime)):
        return value
    if isinstance(value, datetime):
        return value.date()
    is_valid, message = validate_date(value)
    if not is_valid:
        raise ValueError(message)
    return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()


class ViewRecord:
    """Mixin for frozen dataclass view records.

    Subclasses declare:
    - KIND: human name used in error messages and filenames
    - REQUIRED: field names that must not be blank
    - NESTED: {field: record class} for sequences of nested records
    - NESTED_ONE: {field: record class} for a single nested record
    - DATES: fields coerced to datetime.date
    - SEQUENCES: plain sequence fields normalised to tuples
    """

    KIND = 'Record'
    REQUIRED = ()
    NESTED = {}
    NESTED_ONE = {}
    DATES = ()
    SEQUENCES = ()

    def __post_init__(self):
        for name, record_type in self.NESTED.items():
            items = getattr(self, name)
            if items is None:
                continue
            converted = []
            for index, item in enumerate(items):
                converted.append(self._convert(record_type, item, f'{name}[{index}]'))
            object.__setattr__(self, name, tuple(converted))
        for name, record_type in self.NESTED_ONE.items():
            item = getattr(self, name)
            if item is not None:
                object.__setattr__(self, name, self._convert(record_type, item, name))
        for name in self.SEQUENCES:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, tuple(value))
        for name in self.DATES:
            try:
                object.__setattr__(self, name, coerce_date(getattr(self, name)))
            except ValueError as e:
                raise InvalidDocumentRequest(self.KIND, name, f"field '{name}': {e}") from e
        for name in self.REQUIRED:
            is_valid, message = validate_required(getattr(self, name), name)
            if not is_valid:
                raise InvalidDocumentRequest(self.KIND, name, message)
        self.validate()

    def _convert(self, record_type, item, path):
        if isinstance(item, record_type):
            return item
        if not isinstance(item, dict):
            raise InvalidDocumentRequest(self.KIND, path, f"field '{path}' must be a {record_type.KIND} record")
        try:
            return record_type.from_dict(item)
        except InvalidDocumentRequest as e:
            # Re-raise against the outer document so callers see which entry failed
            raise InvalidDocumentRequest(self.KIND, f'{path}.{e.field}', f'{path}: {e.reason}') from e

    def validate(self):
        """Hook for record-specific checks"""

    @classmethod
    def from_dict(cls, data):
        """Build a record from a plain dict, ignoring unknown keys"""
        data = data or {}
        kwargs = {}
        for f in fields(cls):
            if f.name in data:
                kwargs[f.name] = data[f.name]
            elif f.default is MISSING and f.default_factory is MISSING:
                # Missing required keys surface as InvalidDocumentRequest, not TypeError
                kwargs[f.name] = None
        return cls(**kwargs)

    def to_dict(self):
        """Convert the record to a plain dictionary"""
        return asdict(self)
