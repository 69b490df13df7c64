
from google import genai
from google.genai import types
from loguru import logger
from pydantic import ValidationError as SchemaError
from .response_adapters import ResponseAdapter, FencedJsonAdapter
from ..core.config import settings
from ..core.errors import ExtractionError
from ..models.invoice import InvoiceRecord

PDF_MIME_TYPE = "application/pdf"

EXTRACTION_PROMPT = """You extract structured data from Indian GST invoices.
Read the attached invoice PDF and return its contents as JSON with exactly this shape:

{
  "invoiceNumber": "string",
  "invoiceDate": "string (DD/MM/YYYY or DD-MM-YYYY)",
  "vendorName": "string",
  "vendorAddress": "string or null",
  "vendorGSTIN": "string or null",
  "customerName": "string or null",
  "lineItems": [
    {"description": "string", "quantity": number, "rate": number, "amount": number}
  ],
  "subtotal": number,
  "cgst": number or null,
  "sgst": number or null,
  "igst": number or null,
  "totalAmount": number,
  "currency": "string (INR if not stated)"
}

Rules:
- Include every line item with its description, quantity, rate and amount
- Include CGST, SGST and IGST when the invoice shows them
- All numeric values must be JSON numbers, not strings
- Use null for any field you cannot find
- Copy the invoice number and date exactly as printed
- Return ONLY the JSON object, no other text"""


class GeminiExtractionClient:
    """
    Extracts invoice fields from a PDF with a Gemini multimodal model.

    The caller's API key is used for each request, so one client instance
    serves every upload. The reply parser is pluggable through `adapter`.
    """

    def __init__(self, model: str | None = None, adapter: ResponseAdapter | None = None):
        self.model = model or settings.gemini_model
        self.adapter = adapter or FencedJsonAdapter()

    async def _generate(self, pdf_bytes: bytes, api_key: str) -> str:
        client = genai.Client(api_key=api_key)
        # Inline bytes are base64-encoded by the SDK on the wire
        response = await client.aio.models.generate_content(
            model=self.model,
            contents=[
                types.Part.from_bytes(data=pdf_bytes, mime_type=PDF_MIME_TYPE),
                EXTRACTION_PROMPT,
            ],
        )
        text = response.text
        if not text:
            raise ValueError("model returned an empty response")
        return text

    async def extract(self, pdf_bytes: bytes, api_key: str) -> InvoiceRecord:
        logger.info(
            "Sending invoice to Gemini",
            model=self.model,
            size_bytes=len(pdf_bytes),
        )

        try:
            text = await self._generate(pdf_bytes, api_key)
            parsed = self.adapter.parse(text)
            record = InvoiceRecord.decode(parsed)
        except SchemaError as e:
            logger.error(f"Gemini reply has an unexpected shape: {e.error_count()} error(s)")
            raise ExtractionError(f"Failed to extract invoice data: {_schema_summary(e)}")
        except Exception as e:
            logger.error(f"Gemini extraction failed: {str(e)}")
            raise ExtractionError(f"Failed to extract invoice data: {str(e)}")

        logger.info(
            "Successfully extracted invoice data from Gemini",
            invoice_number=record.invoice_number,
            vendor=record.vendor_name,
            line_items=len(record.line_items),
        )
        return record


def _schema_summary(error: SchemaError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(p) for p in detail["loc"]) or "response"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)
