from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from sedation_chart.infrastructure.reporting.pdf_fonts import get_pdf_font_name

FLOW_HEADER = ["Time", "BP", "HR", "RR", "SpO2", "Medications"]


def export_iv_sedation_pdf(
    *,
    header: Mapping[str, Any],
    sections: Sequence[tuple[str, Sequence[tuple[str, str]]]],
    flow_rows: Sequence[Sequence[str]],
    durations: Mapping[str, str],
    file_path: str | Path,
) -> Path:
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    font = get_pdf_font_name()
    doc = SimpleDocTemplate(
        str(file_path),
        pagesize=LETTER,
        title=f"IV Sedation Flow Chart {header.get('Patient', '')}",
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
    )
    cell_style = ParagraphStyle("cell", fontName=font, fontSize=8, leading=10)
    title_style = ParagraphStyle("title", fontName=font, fontSize=14, leading=18, spaceAfter=4 * mm)
    heading_style = ParagraphStyle("heading", fontName=font, fontSize=10, leading=13, spaceAfter=2 * mm)

    elements: list[Any] = [Paragraph("IV Sedation Flow Chart", title_style)]
    header_rows = [[_cell(label, cell_style), _cell(_fmt(value), cell_style)] for label, value in header.items()]
    elements.append(_styled_table(header_rows, font=font, col_widths=[50 * mm, 130 * mm], header_row=False))

    for title, rows in sections:
        elements.append(Spacer(1, 5 * mm))
        elements.append(Paragraph(escape(title), heading_style))
        data = [[_cell(label, cell_style), _cell(value, cell_style)] for label, value in rows]
        if not data:
            data = [["-", "-"]]
        elements.append(_styled_table(data, font=font, col_widths=[60 * mm, 120 * mm], header_row=False))

    elements.append(Spacer(1, 5 * mm))
    elements.append(Paragraph("Monitoring Log", heading_style))
    flow_data: list[list[Any]] = [list(FLOW_HEADER)]
    for row in flow_rows:
        flow_data.append([_cell(value, cell_style) for value in row])
    if len(flow_data) == 1:
        flow_data.append(["-"] * len(FLOW_HEADER))
    elements.append(
        _styled_table(
            flow_data,
            font=font,
            col_widths=[18 * mm, 22 * mm, 15 * mm, 15 * mm, 15 * mm, 95 * mm],
            repeat_rows=1,
        )
    )

    elements.append(Spacer(1, 5 * mm))
    elements.append(Paragraph("Time Summary", heading_style))
    time_data = [[_cell(label, cell_style), _cell(value, cell_style)] for label, value in durations.items()]
    elements.append(_styled_table(time_data, font=font, col_widths=[60 * mm, 120 * mm], header_row=False))

    doc.build(elements)
    return file_path


def _cell(value: Any, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(str(value)), style)


def _styled_table(
    data: list[list[Any]],
    *,
    font: str,
    repeat_rows: int = 0,
    col_widths: list[float] | None = None,
    header_row: bool = True,
) -> Table:
    table = Table(data, repeatRows=repeat_rows, colWidths=col_widths)
    commands: list[tuple[Any, ...]] = [
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("FONTNAME", (0, 0), (-1, -1), font),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("LEFTPADDING", (0, 0), (-1, -1), 2 * mm),
        ("RIGHTPADDING", (0, 0), (-1, -1), 2 * mm),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
    if header_row:
        commands.append(("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey))
    else:
        commands.append(("BACKGROUND", (0, 0), (0, -1), colors.whitesmoke))
    table.setStyle(TableStyle(commands))
    return table


def _fmt(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%m/%d/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%m/%d/%Y")
    return str(value or "")
