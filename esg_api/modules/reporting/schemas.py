"""Reporting enums and result types."""

import enum
from dataclasses import dataclass


class ExportFormat(str, enum.Enum):
    PDF = "pdf"
    EXCEL = "excel"


@dataclass(frozen=True)
class ExportFile:
    """A rendered export ready to be sent as an attachment."""

    content: bytes
    content_type: str
    filename: str
