# ==============================================
# TOPIC 5: REPORTING
# ==============================================
#
# This package renders recovered metadata as a human-readable
# report, grouped by the categories of the analysis topic.
#
# Modules:
# --------
# - report_builder.py → Field collection, coverage, rendering
#
# ==============================================

from .report_builder import (
    ReportFormat,
    ReportRenderer,
    collect_report_fields,
    default_report_path,
    field_coverage,
    format_field_value,
)

__all__ = [
    "ReportFormat",
    "ReportRenderer",
    "collect_report_fields",
    "default_report_path",
    "field_coverage",
    "format_field_value",
]
