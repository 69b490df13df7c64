from fastapi import Depends
from ..services.gemini import GeminiExtractionClient
from ..services.pipeline import InvoicePipeline
from ..services.storage import ActivityLogStore, activity_log


def get_log_store() -> ActivityLogStore:
    return activity_log


def get_extraction_client() -> GeminiExtractionClient:
    return GeminiExtractionClient()


def get_pipeline(
    extraction_client=Depends(get_extraction_client),
    log_store: ActivityLogStore = Depends(get_log_store),
) -> InvoicePipeline:
    return InvoicePipeline(extraction_client=extraction_client, log_store=log_store)
