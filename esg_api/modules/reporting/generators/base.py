"""Abstract base class for export generators."""

from abc import ABC, abstractmethod

from esg_api.modules.reporting.layout import ESGReport


class BaseReportGenerator(ABC):
    """Base class providing shared branding helpers."""

    CONTENT_TYPE: str = "application/octet-stream"
    EXTENSION: str = "bin"

    def __init__(self, brand_color: str = "#1E3A5F") -> None:
        self.brand_color = brand_color

    @abstractmethod
    def generate(self, report: ESGReport) -> tuple[bytes, str]:
        """Serialize a laid-out report.

        Returns:
            Tuple of (file_bytes, content_type).
        """

    @staticmethod
    def _hex(color: str) -> str:
        """'#22C55E' -> '22C55E'."""
        return color.lstrip("#").upper()
