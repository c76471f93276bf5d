from .layout import ReportLayout
from .report_builder import (
    ReportBuilder,
    ReportData,
    ReportTableData,
    report_filename,
    observation_period
)

__all__ = [
    "ReportLayout",
    "ReportBuilder",
    "ReportData",
    "ReportTableData",
    "report_filename",
    "observation_period"
]
