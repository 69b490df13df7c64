"""
Spreadsheet and CSV export of extracted invoices.

Both generators write into the export directory under
`<base name>-<epoch ms>.<ext>`. Output goes to a temporary sibling first and
is renamed into place, so a failed export never leaves a partial file under
the final name.
"""

import os
import re
import time
from pathlib import Path

from loguru import logger
from openpyxl import Workbook

from ..core.config import settings
from ..core.errors import ExportError
from ..models.invoice import InvoiceRecord

DEFAULT_BASE_NAME = "invoice"
LINE_ITEM_HEADER = ["Description", "Quantity", "Rate", "Amount"]


def sanitize_base_name(name: str | None) -> str:
    """Reduce a client supplied name to a safe file stem."""
    if not name:
        return DEFAULT_BASE_NAME
    name = re.sub(r"\.pdf$", "", name.strip(), flags=re.IGNORECASE)
    name = re.sub(r"[\\/]+", "_", name)
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name)
    return name.strip("._") or DEFAULT_BASE_NAME


def _export_path(base_name: str | None, extension: str, export_dir: str | None = None) -> Path:
    directory = Path(export_dir or settings.export_dir)
    directory.mkdir(parents=True, exist_ok=True)
    timestamp = int(time.time() * 1000)
    return directory / f"{sanitize_base_name(base_name)}-{timestamp}.{extension}"


def _partial_path(path: Path) -> Path:
    return path.with_name(f"{path.stem}.part{path.suffix}")


def format_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _csv_value(value) -> str:
    text = format_number(value) if isinstance(value, (int, float)) else str(value)
    if any(ch in text for ch in ',"\r\n'):
        return '"' + text.replace('"', '""') + '"'
    return text


def _quoted(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _detail_rows(record: InvoiceRecord) -> list:
    return [
        ["Invoice Number", record.invoice_number],
        ["Invoice Date", record.invoice_date],
        ["Vendor Name", record.vendor_name],
        ["Vendor Address", record.vendor_address or "N/A"],
        ["Vendor GSTIN", record.vendor_gstin or "N/A"],
        ["Customer Name", record.customer_name or "N/A"],
    ]


def _financial_rows(record: InvoiceRecord) -> list:
    return [
        ["Subtotal", record.subtotal],
        ["CGST", record.cgst],
        ["SGST", record.sgst],
        ["IGST", record.igst],
        ["Total Amount", record.total_amount],
        ["Currency", record.currency],
    ]


def build_workbook(record: InvoiceRecord) -> Workbook:
    workbook = Workbook()

    summary = workbook.active
    summary.title = "Summary"
    summary.append(["Invoice Details", ""])
    for row in _detail_rows(record):
        summary.append(row)
    summary.append([])
    summary.append(["Financial Summary", ""])
    for row in _financial_rows(record):
        summary.append(row)
    summary.column_dimensions["A"].width = 20
    summary.column_dimensions["B"].width = 30

    if record.line_items:
        items = workbook.create_sheet("Line Items")
        items.append(LINE_ITEM_HEADER)
        for item in record.line_items:
            items.append([item.description, item.quantity, item.rate, item.amount])
        for column, width in zip("ABCD", (40, 12, 12, 15)):
            items.column_dimensions[column].width = width

    return workbook


def build_csv(record: InvoiceRecord) -> str:
    lines = ["Invoice Details"]
    lines += [f"{key},{_csv_value(value)}" for key, value in _detail_rows(record)]
    lines.append("")

    lines.append("Line Items")
    lines.append(",".join(LINE_ITEM_HEADER))
    for item in record.line_items:
        lines.append(
            f"{_quoted(item.description)},{format_number(item.quantity)},"
            f"{format_number(item.rate)},{format_number(item.amount)}"
        )
    lines.append("")

    lines.append("Financial Summary")
    lines += [f"{key},{_csv_value(value)}" for key, value in _financial_rows(record)]
    return "\n".join(lines) + "\n"


def generate_workbook(record: InvoiceRecord, base_name: str | None = None, export_dir: str | None = None) -> Path:
    """Write the invoice as an .xlsx workbook and return its path."""
    path = None
    partial = None
    try:
        path = _export_path(base_name, "xlsx", export_dir)
        partial = _partial_path(path)
        build_workbook(record).save(partial)
        os.replace(partial, path)
    except Exception as e:
        logger.error(f"Excel generation error: {str(e)}")
        if partial is not None:
            partial.unlink(missing_ok=True)
        raise ExportError(f"Failed to generate Excel file: {str(e)}", error="Failed to generate Excel file")

    logger.info("Excel export written", path=str(path), line_items=len(record.line_items))
    return path


def generate_delimited_text(record: InvoiceRecord, base_name: str | None = None, export_dir: str | None = None) -> Path:
    """Write the invoice as a sectioned CSV file and return its path."""
    path = None
    partial = None
    try:
        path = _export_path(base_name, "csv", export_dir)
        partial = _partial_path(path)
        partial.write_text(build_csv(record), encoding="utf-8")
        os.replace(partial, path)
    except Exception as e:
        logger.error(f"CSV generation error: {str(e)}")
        if partial is not None:
            partial.unlink(missing_ok=True)
        raise ExportError(f"Failed to generate CSV file: {str(e)}", error="Failed to generate CSV file")

    logger.info("CSV export written", path=str(path), line_items=len(record.line_items))
    return path
