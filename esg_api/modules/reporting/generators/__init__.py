from esg_api.modules.reporting.generators.base import BaseReportGenerator
from esg_api.modules.reporting.generators.pdf_generator import PDFGenerator
from esg_api.modules.reporting.generators.xlsx_generator import XLSXGenerator

__all__ = ["BaseReportGenerator", "PDFGenerator", "XLSXGenerator"]
