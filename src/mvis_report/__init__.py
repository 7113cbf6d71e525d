"""MVIS Report - missing block diagnostics over raw archives."""
from .report import DiagnosticsReporter, ReportSummary

__all__ = ["DiagnosticsReporter", "ReportSummary"]
