"""
Property Stage Progress Report

Renders a PropertyStageReport as a single A4 PDF: a summary block, a
stage table with display numbers, and the reasons each open stage is
still blocked. Uses ReportLab for deterministic PDF generation.
"""

from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from lifecycle.engine import PropertyStageReport
from lifecycle.stages.catalogue import DEFAULT_CATALOGUE, WORKFLOW_LABELS, StageCatalogue, get_display_stage_number
from utils.formatting import format_currency, format_percent


# =============================================================================
# Report Generation Result Types
# =============================================================================

@dataclass
class ReportSuccess:
    """Returned when PDF generation succeeds."""
    path: Path
    stages_included: int


# =============================================================================
# Color Palette
# =============================================================================

class Palette:
    """Print-friendly palette."""
    BLACK = colors.Color(0.1, 0.1, 0.1)
    CHARCOAL = colors.Color(0.2, 0.2, 0.22)
    GRAY = colors.Color(0.5, 0.5, 0.5)
    LIGHT_GRAY = colors.Color(0.85, 0.85, 0.85)
    PALE_GRAY = colors.Color(0.95, 0.95, 0.95)
    WHITE = colors.white

    SUCCESS = colors.Color(0.15, 0.4, 0.25)
    WARNING = colors.Color(0.5, 0.4, 0.15)


def get_report_styles():
    """Sample stylesheet plus the report's own paragraph styles."""
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name='ReportTitle',
        parent=styles['Normal'],
        fontSize=16,
        leading=20,
        textColor=Palette.BLACK,
        alignment=TA_LEFT,
        fontName='Helvetica-Bold',
        spaceAfter=4*mm,
    ))
    styles.add(ParagraphStyle(
        name='SectionTitle',
        parent=styles['Normal'],
        fontSize=11,
        leading=14,
        textColor=Palette.CHARCOAL,
        fontName='Helvetica-Bold',
        spaceBefore=6*mm,
        spaceAfter=3*mm,
    ))
    styles.add(ParagraphStyle(
        name='ReportBody',
        parent=styles['Normal'],
        fontSize=9,
        leading=13,
        textColor=Palette.CHARCOAL,
        fontName='Helvetica',
    ))
    return styles


# =============================================================================
# Report Generator Class
# =============================================================================

class ProgressReportGenerator:
    """
    Generates stage progress PDFs.

    Usage:
        generator = ProgressReportGenerator(output_dir=Path("reports"))
        result = generator.generate_report(engine.evaluate("prop-1", "direct_addition"))
    """

    PAGE_WIDTH, PAGE_HEIGHT = A4
    MARGIN_LEFT = 18*mm
    MARGIN_RIGHT = 18*mm
    MARGIN_TOP = 18*mm
    MARGIN_BOTTOM = 22*mm

    def __init__(self, output_dir: Optional[Path] = None, catalogue: Optional[StageCatalogue] = None):
        self.output_dir = Path(output_dir) if output_dir else Path("reports")
        self.catalogue = catalogue or DEFAULT_CATALOGUE
        self.styles = get_report_styles()

    def generate_report(self, report: PropertyStageReport) -> ReportSuccess:
        """
        Write the PDF for a stage report.

        Args:
            report: Evaluated stage report

        Returns:
            ReportSuccess with the written path
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filename = f"progress-{report.property_id}-{report.workflow_type.value}.pdf"
        output_path = self.output_dir / filename

        output_path.write_bytes(self.generate_to_buffer(report))

        return ReportSuccess(path=output_path, stages_included=len(report.statuses))

    def generate_to_buffer(self, report: PropertyStageReport) -> bytes:
        """Generate PDF and return as bytes."""
        buffer = BytesIO()
        self._build_document(report, buffer)
        return buffer.getvalue()

    def _build_document(self, report: PropertyStageReport, buffer: BytesIO):
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=self.MARGIN_LEFT,
            rightMargin=self.MARGIN_RIGHT,
            topMargin=self.MARGIN_TOP,
            bottomMargin=self.MARGIN_BOTTOM,
            title=f"Stage Progress - {report.property_id}",
            subject=WORKFLOW_LABELS[report.workflow_type],
        )

        story = []
        story.extend(self._build_summary(report))
        story.extend(self._build_stage_table(report))
        story.extend(self._build_blocking_reasons(report))

        doc.build(story, onFirstPage=self._draw_page_frame, onLaterPages=self._draw_page_frame)

    def _draw_page_frame(self, canvas_obj: canvas.Canvas, doc):
        """Footer with generation date left, page number right."""
        canvas_obj.saveState()
        canvas_obj.setFont('Helvetica', 7)
        canvas_obj.setFillColor(Palette.GRAY)
        canvas_obj.drawString(
            self.MARGIN_LEFT,
            self.MARGIN_BOTTOM - 10*mm,
            f"Generated {datetime.now().strftime('%Y-%m-%d')}",
        )
        canvas_obj.drawRightString(
            self.PAGE_WIDTH - self.MARGIN_RIGHT,
            self.MARGIN_BOTTOM - 10*mm,
            f"{doc.page}",
        )
        canvas_obj.restoreState()

    # =========================================================================
    # Sections
    # =========================================================================

    def _display(self, report: PropertyStageReport, stage_number: int) -> int:
        return get_display_stage_number(stage_number, report.workflow_type)

    def _build_summary(self, report: PropertyStageReport) -> list:
        elements = []
        elements.append(Paragraph(f"Stage Progress: {escape(report.property_id)}", self.styles['ReportTitle']))

        if report.current_stage is None:
            current = "All stages complete"
        else:
            current = (
                f"Stage {self._display(report, report.current_stage)} - "
                f"{self.catalogue.stage_label(report.current_stage)}"
            )

        progress = report.progress
        rows = [
            ["Workflow", WORKFLOW_LABELS[report.workflow_type]],
            ["Current stage", current],
            ["Documents", f"{progress.completed} of {progress.total} ({format_percent(progress.percentage)})"],
        ]
        table = Table(rows, colWidths=[40*mm, 134*mm])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('TEXTCOLOR', (0, 0), (-1, -1), Palette.CHARCOAL),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2*mm),
        ]))
        elements.append(table)
        return elements

    def _build_stage_table(self, report: PropertyStageReport) -> list:
        elements = []
        elements.append(Paragraph("Stages", self.styles['SectionTitle']))

        rows = [["Stage", "Name", "Documents", "Payment", "Status"]]
        for stage_number, status in report.statuses.items():
            if status.is_overall_complete:
                state = "Complete"
            elif report.is_stage_accessible(stage_number):
                state = "Open"
            else:
                state = "Locked"
            financial = report.financial_statuses.get(stage_number)
            if not status.has_financial_requirement:
                payment = "-"
            elif status.financially_complete:
                payment = "Paid"
            elif financial is not None and financial.pending_amount:
                payment = format_currency(financial.pending_amount)
            else:
                payment = "Outstanding"

            rows.append([
                str(self._display(report, stage_number)),
                self.catalogue.stage_label(stage_number),
                "Complete" if status.documents_complete else "Missing",
                payment,
                state,
            ])

        table = Table(rows, colWidths=[16*mm, 72*mm, 28*mm, 28*mm, 30*mm], repeatRows=1)
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 8.5),
            ('BACKGROUND', (0, 0), (-1, 0), Palette.CHARCOAL),
            ('TEXTCOLOR', (0, 0), (-1, 0), Palette.WHITE),
            ('TEXTCOLOR', (0, 1), (-1, -1), Palette.CHARCOAL),
            ('ALIGN', (0, 0), (0, -1), 'CENTER'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('GRID', (0, 0), (-1, -1), 0.5, Palette.LIGHT_GRAY),
            ('TOPPADDING', (0, 0), (-1, -1), 2*mm),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2*mm),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [Palette.WHITE, Palette.PALE_GRAY]),
        ]))
        elements.append(table)
        return elements

    def _build_blocking_reasons(self, report: PropertyStageReport) -> list:
        elements = []
        blocked = [
            (stage_number, status)
            for stage_number, status in report.statuses.items()
            if status.blocking_reasons and report.is_stage_accessible(stage_number)
        ]
        if not blocked:
            return elements

        elements.append(Paragraph("Outstanding Items", self.styles['SectionTitle']))
        for stage_number, status in blocked:
            elements.append(Paragraph(
                f"<b>Stage {self._display(report, stage_number)}</b>",
                self.styles['ReportBody'],
            ))
            for reason in status.blocking_reasons:
                elements.append(Paragraph(f"&bull; {escape(reason)}", self.styles['ReportBody']))
            elements.append(Spacer(1, 3*mm))
        return elements


def generate_progress_report(report: PropertyStageReport, output_dir: Optional[Path] = None) -> ReportSuccess:
    """Generate a stage progress PDF with the default catalogue."""
    return ProgressReportGenerator(output_dir=output_dir).generate_report(report)
