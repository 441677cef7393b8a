from io import BytesIO
from typing import Any, Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

BOM_COLUMNS = ["Material", "Unit", "Quantity", "Unit Cost", "Total Cost", "Source"]
BOM_ALIGNMENTS = ["left", "center", "right", "right", "right", "center"]


def _create_styles():
    """Create reusable style definitions."""
    thin_border = Side(style="thin", color="000000")
    return {
        "title_font": Font(bold=True, size=14),
        "section_font": Font(bold=True, size=11),
        "header_font": Font(bold=True, size=10),
        "header_fill": PatternFill(start_color="D9E1F2", end_color="D9E1F2", fill_type="solid"),
        "warning_fill": PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid"),
        "subtotal_font": Font(bold=True),
        "border": Border(left=thin_border, right=thin_border, top=thin_border, bottom=thin_border),
        "center_align": Alignment(horizontal="center", vertical="center"),
        "right_align": Alignment(horizontal="right", vertical="center"),
        "left_align": Alignment(horizontal="left", vertical="center"),
    }


def _apply_header_row(ws, row: int, columns: List[str], styles: dict):
    for col_idx, col_name in enumerate(columns, start=1):
        cell = ws.cell(row=row, column=col_idx, value=col_name)
        cell.font = styles["header_font"]
        cell.fill = styles["header_fill"]
        cell.border = styles["border"]
        cell.alignment = styles["center_align"]


def _apply_data_row(ws, row: int, values: List[Any], styles: dict, alignments: List[str] = None):
    for col_idx, value in enumerate(values, start=1):
        cell = ws.cell(row=row, column=col_idx, value=value)
        cell.border = styles["border"]
        if alignments and col_idx <= len(alignments):
            align_type = alignments[col_idx - 1]
            cell.alignment = styles.get(f"{align_type}_align", styles["left_align"])


def _set_column_widths(ws, widths: List[int]):
    for col_idx, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width


def _format_number(value: Optional[float], decimals: int = 2) -> str:
    if value is None:
        return "-"
    return f"{value:,.{decimals}f}"


def _format_currency(value: Optional[float], currency: str) -> str:
    if value is None:
        return "-"
    return f"{currency} {value:,.2f}"


def _format_margin(value: Optional[float]) -> str:
    """Margins are ratios; an undefined margin (zero price) prints as a dash."""
    if value is None:
        return "-"
    return f"{value * 100:.1f}%"


def _write_bom_block(ws, row: int, title: str, lines: List[Dict[str, Any]], total: float, styles: dict, currency: str) -> int:
    ws.cell(row=row, column=1, value=title).font = styles["section_font"]
    row += 1
    if not lines:
        cell = ws.cell(row=row, column=1, value="No bill of materials")
        cell.fill = styles["warning_fill"]
        return row + 2

    _apply_header_row(ws, row, BOM_COLUMNS, styles)
    row += 1
    for line in lines:
        values = [
            line.get("material_name") or line.get("material_id"),
            line.get("unit") or "-",
            _format_number(line.get("quantity"), 3),
            _format_currency(line.get("unit_cost"), currency),
            _format_currency(line.get("total_cost"), currency),
            line.get("source", "-"),
        ]
        _apply_data_row(ws, row, values, styles, BOM_ALIGNMENTS)
        row += 1

    _apply_data_row(ws, row, ["TOTAL", "", "", "", _format_currency(total, currency), ""], styles, BOM_ALIGNMENTS)
    for col in range(1, len(BOM_COLUMNS) + 1):
        ws.cell(row=row, column=col).font = styles["subtotal_font"]
    return row + 2


def build_cost_report_excel(summary: Dict[str, Any], currency: str = "IDR", generated_at: str = "") -> BytesIO:
    """Workbook with the product's cost roll-up and one block per active variation."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Cost Report"
    styles = _create_styles()

    current_row = 1
    ws.cell(row=current_row, column=1, value="PRODUCT COST REPORT").font = styles["title_font"]
    ws.merge_cells(start_row=current_row, start_column=1, end_row=current_row, end_column=6)
    current_row += 2

    header_info = [
        ("Product:", summary.get("name", "-")),
        ("Product ID:", summary.get("product_id", "-")),
        ("Report Date:", generated_at[:10] if generated_at else "-"),
        ("Price:", _format_currency(summary.get("price"), currency)),
        ("Material Cost:", _format_currency(summary.get("total_material_cost"), currency)),
        ("Profit Margin:", _format_margin(summary.get("profit_margin"))),
    ]
    for label, value in header_info:
        ws.cell(row=current_row, column=1, value=label).font = Font(bold=True)
        ws.cell(row=current_row, column=2, value=value)
        current_row += 1

    if summary.get("profit_margin") is None:
        warning_cell = ws.cell(row=current_row, column=1, value="Price is zero - margin is undefined")
        warning_cell.fill = styles["warning_fill"]
        ws.merge_cells(start_row=current_row, start_column=1, end_row=current_row, end_column=4)
        current_row += 1
    current_row += 1

    current_row = _write_bom_block(
        ws,
        current_row,
        "BASE BILL OF MATERIALS",
        summary.get("bom", []),
        summary.get("total_material_cost", 0.0),
        styles,
        currency,
    )

    for variation in summary.get("variations", []):
        title = (
            f"VARIATION: {variation.get('name', '-')} | "
            f"Price {_format_currency(variation.get('final_price'), currency)} | "
            f"Margin {_format_margin(variation.get('profit_margin'))}"
        )
        current_row = _write_bom_block(
            ws,
            current_row,
            title,
            variation.get("bom", []),
            variation.get("total_material_cost", 0.0),
            styles,
            currency,
        )

    _set_column_widths(ws, [28, 12, 14, 18, 18, 12])

    stream = BytesIO()
    wb.save(stream)
    stream.seek(0)
    return stream
