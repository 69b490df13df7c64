import asyncio
from fastapi import APIRouter, Depends, File, Header, UploadFile
from fastapi.responses import FileResponse
from loguru import logger
from ..deps import get_log_store, get_pipeline
from ...models.invoice import ExportRequest, LogEntry, utc_timestamp
from ...services.exporter import generate_delimited_text, generate_workbook
from ...services.pipeline import InvoicePipeline
from ...services.storage import ActivityLogStore

router = APIRouter(prefix="/api/invoice", tags=["invoices"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("/upload")
async def upload_invoice(
    invoice: UploadFile | None = File(None),
    x_api_key: str | None = Header(None),
    pipeline: InvoicePipeline = Depends(get_pipeline),
):
    """
    Extract structured fields from an uploaded invoice PDF using Gemini.

    Expects multipart/form-data with the PDF in the `invoice` field and the
    caller's Gemini API key in the `X-API-Key` header.

    Example response:
    {
        "success": true,
        "data": {"invoiceNumber": "INV-1", "totalAmount": 118, ...},
        "fileName": "invoice.pdf"
    }

    Errors: 400 (missing file/key, not a PDF), 413 (over 10 MiB),
    500 (extraction failed; `message` carries the cause).
    """
    file_name = invoice.filename if invoice else None
    # One byte past the limit is enough to reject an oversized upload
    content = await invoice.read(pipeline.max_upload_bytes + 1) if invoice else None
    content_type = invoice.content_type if invoice else None

    result = await pipeline.process_upload(file_name, content_type, content, x_api_key)
    return result.to_dict()


async def _export(req: ExportRequest, log_store: ActivityLogStore, export_format: str):
    generate = generate_workbook if export_format == "excel" else generate_delimited_text
    path = await asyncio.to_thread(generate, req.data, req.file_name)

    await log_store.append(
        LogEntry(action="export", status="success", format=export_format, file_name=req.file_name or "invoice")
    )
    return path


@router.post("/export/excel")
async def export_excel(req: ExportRequest, log_store: ActivityLogStore = Depends(get_log_store)):
    """Download the extracted invoice as an Excel workbook (Summary + Line Items sheets)"""
    path = await _export(req, log_store, "excel")
    return FileResponse(path, filename=f"{req.file_name or 'invoice'}.xlsx", media_type=XLSX_MEDIA_TYPE)


@router.post("/export/csv")
async def export_csv(req: ExportRequest, log_store: ActivityLogStore = Depends(get_log_store)):
    """Download the extracted invoice as a sectioned CSV file"""
    path = await _export(req, log_store, "csv")
    return FileResponse(path, filename=f"{req.file_name or 'invoice'}.csv", media_type="text/csv")


@router.get("/logs")
async def list_logs(log_store: ActivityLogStore = Depends(get_log_store)):
    """Return the activity log, oldest entry first"""
    logs = await log_store.list()
    logger.info(f"Found {len(logs)} logs")
    return {"success": True, "logs": logs}


@router.get("/logs/test")
async def logs_test():
    """Static diagnostic response (liveness of the logs route only)"""
    return {
        "message": "Logs endpoint is working",
        "timestamp": utc_timestamp(),
        "logsPath": "Check /api/invoice/logs for actual logs",
    }
