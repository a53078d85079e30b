"""Conversion options and their environment defaults."""

import os
from dataclasses import dataclass, field, replace
from datetime import date

from dotenv import load_dotenv

# Names accepted on the command line, in the app and in CPA005_RECORD_DELIMITER
DELIMITERS = {
    "none": "",
    "lf": "\n",
    "crlf": "\r\n",
    "double": "\n\n",
}
DEFAULT_DELIMITER = "lf"

ON_INVALID_ROW = ("abort", "skip")


@dataclass(frozen=True)
class ConversionOptions:
    record_delimiter: str = DELIMITERS[DEFAULT_DELIMITER]
    on_invalid_row: str = "abort"
    encoding: str = "ascii"
    file_date: date = field(default_factory=date.today)

    def __post_init__(self):
        if self.on_invalid_row not in ON_INVALID_ROW:
            raise ValueError(
                f"on_invalid_row must be one of {', '.join(ON_INVALID_ROW)}, got {self.on_invalid_row!r}"
            )

    def with_delimiter(self, name):
        return replace(self, record_delimiter=delimiter_for(name))


def delimiter_for(name):
    try:
        return DELIMITERS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown record delimiter {name!r}, expected one of {', '.join(DELIMITERS)}"
        ) from None


def options_from_env(**overrides):
    """Build options from ``CPA005_*`` environment variables (and ``.env``)."""
    load_dotenv()
    values = {
        "record_delimiter": delimiter_for(os.getenv("CPA005_RECORD_DELIMITER", DEFAULT_DELIMITER)),
        "on_invalid_row": os.getenv("CPA005_ON_INVALID_ROW", "abort").strip().lower(),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ConversionOptions(**values)


def app_password():
    """Password guarding the web app, or ``None`` when the app is open."""
    load_dotenv()
    return os.getenv("CPA005_APP_PASSWORD") or None
