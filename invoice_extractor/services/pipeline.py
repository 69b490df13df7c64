"""
Upload pipeline: validate -> store scratch copy -> extract -> log.

Validation failures short-circuit before anything is written or logged.
Once validation passes, every outcome is recorded in the activity log:
`upload/processing` first, then `extraction/success` or `extraction/failed`.
"""

import asyncio
import random
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger

from .storage.activity_log_base import ActivityLogStore
from ..core.config import settings
from ..core.errors import ExtractionError, ValidationError
from ..models.invoice import InvoiceRecord, LogEntry

PDF_CONTENT_TYPE = "application/pdf"


class ExtractionClient(Protocol):
    async def extract(self, pdf_bytes: bytes, api_key: str) -> InvoiceRecord: ...


@dataclass
class UploadResult:
    data: InvoiceRecord
    file_name: str

    def to_dict(self) -> dict:
        return {"success": True, "data": self.data.to_payload(), "fileName": self.file_name}


def scratch_name(file_name: str) -> str:
    """Unique on-disk name for an uploaded file: <epoch ms>-<random>-<original>."""
    safe = re.sub(r"[^A-Za-z0-9._-]+", "_", Path(file_name).name) or "upload.pdf"
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}-{safe}"


class InvoicePipeline:
    """
    Orchestrates one invoice upload.

    Args:
        extraction_client: Anything with `async extract(pdf_bytes, api_key)`
        log_store: Activity log receiving the pipeline events
        upload_dir: Scratch directory for raw uploads (files are kept)
        max_upload_bytes: Largest accepted file
    """

    def __init__(
        self,
        extraction_client: ExtractionClient,
        log_store: ActivityLogStore,
        upload_dir: Optional[str] = None,
        max_upload_bytes: Optional[int] = None,
    ):
        self.extraction_client = extraction_client
        self.log_store = log_store
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.max_upload_bytes = max_upload_bytes or settings.max_upload_bytes

    def validate(self, file_name: Optional[str], content_type: Optional[str], content: Optional[bytes], api_key: Optional[str]) -> None:
        if file_name is None or content is None:
            raise ValidationError("no file uploaded", error="No file uploaded")

        if content_type != PDF_CONTENT_TYPE:
            raise ValidationError(
                f"only PDF files are allowed (got {content_type or 'unknown'})",
                error="Only PDF files are allowed",
            )

        if len(content) > self.max_upload_bytes:
            raise ValidationError(
                f"file exceeds the {self.max_upload_bytes} byte limit",
                error="File too large",
                status_code=413,
            )

        if not api_key or not api_key.strip():
            raise ValidationError(
                "credential required: provide your Gemini API key in the X-API-Key header",
                error="Gemini API key is required",
            )

    async def _store_upload(self, file_name: str, content: bytes) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self.upload_dir / scratch_name(file_name)
        await asyncio.to_thread(path.write_bytes, content)
        return path

    async def process_upload(
        self,
        file_name: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
        api_key: Optional[str],
    ) -> UploadResult:
        """
        Run the upload through extraction.

        Returns:
            UploadResult with the fully defaulted record and the original file name

        Raises:
            ValidationError: missing file or credential, wrong type, too large
            ExtractionError: anything failing after validation (already logged)
        """
        self.validate(file_name, content_type, content, api_key)
        api_key = api_key.strip()

        try:
            stored_path = await self._store_upload(file_name, content)
            logger.info("Invoice upload stored", file_name=file_name, path=str(stored_path), size_bytes=len(content))

            await self.log_store.append(
                LogEntry(action="upload", status="processing", file_name=file_name)
            )

            record = await self.extraction_client.extract(content, api_key)
        except Exception as e:
            message = e.message if isinstance(e, ExtractionError) else str(e)
            logger.error("Error processing invoice: {message}", message=message, file_name=file_name)
            await self.log_store.append(
                LogEntry(action="extraction", status="failed", file_name=file_name, error=message)
            )
            raise ExtractionError(message) from e

        await self.log_store.append(
            LogEntry(action="extraction", status="success", file_name=file_name, data=record)
        )
        return UploadResult(data=record, file_name=file_name)
