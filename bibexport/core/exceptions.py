"""Exception classes for the export engine."""


class ExportError(Exception):
    """Base exception for export errors."""

    pass


class DuplicateFieldError(ExportError):
    """Raised when a field is added twice to the same record."""

    def __init__(self, field_name: str, item_id: str | int, citekey: str):
        """Initialize with the field name and the record identity."""
        self.field_name = field_name
        self.item_id = item_id
        self.citekey = citekey
        super().__init__(
            f"Duplicate field '{field_name}' for item {item_id} ({citekey})"
        )


class RecordStateError(ExportError):
    """Raised when a record is used after it has been serialized."""

    def __init__(self, citekey: str, action: str):
        """Initialize with the record key and the attempted action."""
        self.citekey = citekey
        self.action = action
        super().__init__(f"Cannot {action} record {citekey}: already serialized")


class ConfigurationError(ExportError, ValueError):
    """Raised when export configuration is invalid."""

    pass


class ItemFormatError(ExportError, ValueError):
    """Raised when item input cannot be decoded."""

    def __init__(self, source: str, details: str = ""):
        """Initialize with the input source and details."""
        self.source = source
        message = f"Invalid item data in {source}"
        if details:
            message += f": {details}"
        super().__init__(message)
