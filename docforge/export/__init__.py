"""HTML and PDF export of composed documents."""

from docforge.export.manager import ExportManager
from docforge.export.models import (
    BatchExportItem,
    BatchExportSummary,
    ClientCustomizationProfile,
    ExportOptions,
    ExportResult,
)

__all__ = [
    "BatchExportItem",
    "BatchExportSummary",
    "ClientCustomizationProfile",
    "ExportManager",
    "ExportOptions",
    "ExportResult",
]
