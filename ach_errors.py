"""Errors raised while turning a payment sheet into a CPA-005 file."""


class ConversionError(Exception):
    """Base class for every failure that aborts a conversion run."""


class FieldOverflow(ConversionError):
    """A value does not fit in its fixed-width field."""

    def __init__(self, field, value, width):
        self.field = field
        self.value = value
        self.width = width
        super().__init__(
            f"{field}: value {str(value)!r} is {len(str(value))} characters, "
            f"field width is {width}"
        )


class FieldInvalid(ConversionError):
    """A value cannot be rendered as its field type at all."""

    def __init__(self, field, value, reason):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field}: {reason} (got {value!r})")


class RowInvalid(ConversionError):
    """A payment row fails a shape check."""

    def __init__(self, row_index, field, reason):
        self.row_index = row_index
        self.field = field
        self.reason = reason
        super().__init__(f"Row {row_index}, {field}: {reason}")


class MetadataMissing(ConversionError):
    """A required file-level value is absent from the sheet."""

    def __init__(self, name, position=None):
        self.name = name
        self.position = position
        where = f" (expected at row {position[0]}, column {position[1]})" if position else ""
        super().__init__(f"Missing {name}{where}")


class MetadataInvalid(ConversionError):
    """A file-level value is present but unusable."""

    def __init__(self, name, value, reason):
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {name} {value!r}: {reason}")


class UnknownRecordMode(ConversionError):
    def __init__(self, mode):
        self.mode = mode
        super().__init__(f"Unknown record mode {mode!r}, expected 'PAD' or 'PDS'")


class SheetReadError(ConversionError):
    """The input spreadsheet or CSV could not be read."""


class OutputWriteError(ConversionError):
    """The output sink could not be written to."""
