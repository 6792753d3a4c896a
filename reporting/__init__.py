"""
Reporting module for the lifecycle engine.

Renders property stage reports as PDF.

Usage:
    from reporting import generate_progress_report

    result = generate_progress_report(engine.evaluate("prop-1", "direct_addition"))
    print(result.path)
"""

from .progress_report import ProgressReportGenerator, ReportSuccess, generate_progress_report

__all__ = [
    "ProgressReportGenerator",
    "ReportSuccess",
    "generate_progress_report",
]
