"""PDF generation for inspection records (Form 3A) and weekly reports."""

from __future__ import annotations

from io import BytesIO
from typing import List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfgen import canvas
from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .. import localization
from ..models import InspectionRecord
from ..weekly.models import WeeklyReportView

CJK_FONT = "MSung-Light"
LATIN_FONT = "Helvetica"


def _font_for(locale: str) -> str:
    if locale != "zh":
        return LATIN_FONT
    if CJK_FONT not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(UnicodeCIDFont(CJK_FONT))
    return CJK_FONT


def _footer(canvas_obj: canvas.Canvas, doc, *, text: str, font: str) -> None:
    canvas_obj.saveState()
    canvas_obj.setFont(font, 8)
    canvas_obj.setFillColor(colors.grey)
    canvas_obj.drawString(doc.leftMargin, 20, text)
    canvas_obj.drawRightString(doc.pagesize[0] - doc.rightMargin, 20, str(canvas_obj.getPageNumber()))
    canvas_obj.restoreState()


def build_weekly_report_pdf(view: WeeklyReportView, *, locale: str) -> bytes:
    """Render ``view`` as a four-section report and return the PDF bytes."""
    locale = localization.normalize_locale(locale)
    labels = localization.PDF_LABELS[locale]
    font = _font_for(locale)
    report = view.report

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=view.report_number,
        leftMargin=36,
        rightMargin=36,
        topMargin=48,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    header_style = ParagraphStyle("WRHeader", parent=styles["Heading2"], fontName=font)
    section_style = ParagraphStyle("WRSection", parent=styles["Heading3"], fontName=font)
    body_style = ParagraphStyle("WRBody", parent=styles["BodyText"], fontName=font, fontSize=9, leading=12)

    def p(text: object) -> Paragraph:
        return Paragraph(escape("" if text is None else str(text)), body_style)

    elements: List = []
    elements.append(Paragraph(escape(labels["title"]), header_style))
    meta_lines = [
        f"{labels['report_no']}: {view.report_number}",
        f"{labels['period']}: {view.period_label(locale)} "
        f"({report.week_start.isoformat()} - {report.week_end.isoformat()})",
        f"{labels['report_date']}: {report.report_date.isoformat()}",
        f"{labels['status']}: {localization.REPORT_STATUS_LABELS[locale][report.status.value]}",
    ]
    for line in meta_lines:
        elements.append(p(line))
    elements.append(Spacer(1, 12))

    # 1.0 summary
    elements.append(Paragraph(escape(labels["summary"]), section_style))
    elements.append(p(f"{labels['total_inspections']}: {view.total_inspections}"))
    elements.append(p(f"{labels['critical']}: {view.critical_hazards}"))
    if report.summary:
        elements.append(Spacer(1, 6))
        elements.append(p(report.summary))
    elements.append(Spacer(1, 12))

    table_style = TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("FONTNAME", (0, 0), (-1, -1), font),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
    )

    # 2.0 inspection record
    elements.append(Paragraph(escape(labels["records"]), section_style))
    if view.inspections:
        rows = [[p(labels["date"]), p(labels["location"]), p(labels["inspector"]), p(labels["overall_risk"]), p(labels["items"])]]
        for record in sorted(view.inspections, key=lambda r: r.date):
            rows.append(
                [
                    p(record.date.isoformat()),
                    p(record.location),
                    p(record.inspector_name),
                    p(localization.risk_label(record.overall_risk, locale)),
                    p(len(record.findings)),
                ]
            )
        table = Table(rows, repeatRows=1, colWidths=[70, 150, 110, 80, 50])
        table.setStyle(table_style)
        elements.append(table)
    else:
        elements.append(p(labels["none"]))
    elements.append(Spacer(1, 12))

    # 3.0 findings log
    elements.append(Paragraph(escape(labels["findings"]), section_style))
    if view.findings:
        rows = [
            [
                p(labels["date"]),
                p(labels["location"]),
                p(labels["category"]),
                p(labels["observation"]),
                p(labels["risk"]),
                p(labels["action"]),
                p(labels["target"]),
                p(labels["action_status"]),
                p(labels["evidence"]),
            ]
        ]
        for entry in view.findings:
            finding = entry.finding
            evidence = labels["photo"] if (finding.photo_url or finding.photo_data) else ""
            rows.append(
                [
                    p(entry.inspection_date.isoformat()),
                    p(entry.location),
                    p(finding.category),
                    p(finding.observation),
                    p(localization.risk_label(finding.risk_level, locale)),
                    p(finding.remedial_action),
                    p(finding.target_date.isoformat() if finding.target_date else ""),
                    p(localization.action_status_label(finding.action_status, locale)),
                    p(evidence),
                ]
            )
        table = Table(rows, repeatRows=1, colWidths=[52, 58, 55, 90, 36, 90, 52, 44, 46])
        table.setStyle(table_style)
        elements.append(table)
    else:
        elements.append(p(labels["no_findings"]))
    elements.append(Spacer(1, 12))

    # 4.0 endorsement
    elements.append(Paragraph(escape(labels["endorsement"]), section_style))
    sign_rows = [
        [p(labels["prepared_by"]), p(labels["endorsed_by"])],
        [p(f"{report.prepared_by} ({report.prepared_by_title})" if report.prepared_by_title else report.prepared_by), p(report.endorsed_by)],
    ]
    sign_table = Table(sign_rows, colWidths=[260, 260], rowHeights=[None, 48])
    sign_table.setStyle(table_style)
    elements.append(sign_table)

    footer = lambda canv, d: _footer(canv, d, text=view.report_number, font=font)  # noqa: E731
    doc.build(elements, onFirstPage=footer, onLaterPages=footer)
    return buffer.getvalue()


def _grid_style(font: str) -> TableStyle:
    return TableStyle(
        [
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("BACKGROUND", (0, 0), (0, -1), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, -1), font),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
    )


def build_inspection_pdf(record: InspectionRecord, *, locale: str) -> bytes:
    """Render one inspection as Form 3A and return the PDF bytes.

    Each finding gets its own key/value block so a block never splits
    across columns; at-risk findings add their rating and remediation.
    """
    locale = localization.normalize_locale(locale)
    labels = localization.FORM_3A_LABELS[locale]
    font = _font_for(locale)

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=f"Form3A_{record.id}",
        leftMargin=28,
        rightMargin=28,
        topMargin=28,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    header_style = ParagraphStyle("F3AHeader", parent=styles["Heading2"], fontName=font)
    section_style = ParagraphStyle("F3ASection", parent=styles["Heading3"], fontName=font)
    body_style = ParagraphStyle("F3ABody", parent=styles["BodyText"], fontName=font, fontSize=9, leading=12)

    def p(text: object) -> Paragraph:
        return Paragraph(escape("" if text is None else str(text)), body_style)

    elements: List = [
        Paragraph(escape(labels["title"]), header_style),
        p(f"{labels['inspection_no']} #{record.id[-6:]}"),
        p(f"{record.location} • {record.date.isoformat()} • {labels['recorded']}"),
        Spacer(1, 10),
        Paragraph(escape(labels["summary"]), section_style),
        p(record.summary),
        p(f"{labels['inspector']} {record.inspector_name}"),
        p(f"{labels['overall_risk']}: {localization.risk_label(record.overall_risk, locale)}"),
        Spacer(1, 10),
        Paragraph(escape(labels["list"]), section_style),
    ]

    for index, finding in enumerate(record.findings, start=1):
        rows = [
            [p(f"{index:02d}"), p(finding.category)],
            [p(labels["status"]), p(labels["violation"] if finding.is_at_risk else labels["compliant"])],
        ]
        if finding.is_at_risk:
            rows += [
                [p(labels["likelihood"]), p(localization.LIKELIHOOD_LABELS[locale][finding.risk.likelihood])],
                [p(labels["severity"]), p(localization.SEVERITY_LABELS[locale][finding.risk.severity])],
                [p(labels["risk"]), p(localization.risk_label(finding.risk_level, locale))],
            ]
        rows.append([p(labels["observation"]), p(finding.observation)])
        if finding.is_at_risk:
            rows += [
                [p(labels["action"]), p(finding.remedial_action)],
                [p(labels["target"]), p(finding.target_date.isoformat() if finding.target_date else "")],
            ]
        if finding.photo_url or finding.photo_data:
            rows.append([p(labels["evidence"]), p(finding.photo_url or labels["photo"])])
        table = Table(rows, colWidths=[110, 429])
        table.setStyle(_grid_style(font))
        elements.append(KeepTogether([table, Spacer(1, 8)]))

    footer = lambda canv, d: _footer(canv, d, text=labels["footer"], font=font)  # noqa: E731
    doc.build(elements, onFirstPage=footer, onLaterPages=footer)
    return buffer.getvalue()


__all__ = ["build_inspection_pdf", "build_weekly_report_pdf"]
