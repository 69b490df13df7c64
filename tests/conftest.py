"""
Pytest configuration and shared fixtures.

This file registers custom pytest markers and command-line options, and
wires the FastAPI app to an in-memory activity log and a fake extraction
client so API tests never call Gemini.
"""

import pytest
from fastapi.testclient import TestClient
from invoice_extractor.api.main import app
from invoice_extractor.api.deps import get_extraction_client, get_log_store
from invoice_extractor.core.config import settings
from invoice_extractor.models.invoice import InvoiceRecord
from invoice_extractor.services.storage import InMemoryLogStore


SAMPLE_INVOICE = {
    "invoiceNumber": "INV-1",
    "invoiceDate": "15/08/2025",
    "vendorName": "Sharma Traders",
    "vendorAddress": "12 MG Road, Bengaluru",
    "vendorGSTIN": "29ABCDE1234F1Z5",
    "customerName": "Acme India Pvt Ltd",
    "lineItems": [{"description": "Widget", "quantity": 2, "rate": 50, "amount": 100}],
    "subtotal": 100,
    "cgst": 9,
    "sgst": 9,
    "igst": None,
    "totalAmount": 118,
    "currency": "INR",
}


class FakeExtractionClient:
    """Stands in for GeminiExtractionClient; records calls"""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def extract(self, pdf_bytes: bytes, api_key: str):
        self.calls.append((pdf_bytes, api_key))
        if self.error is not None:
            raise self.error
        return self.result


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against the real Gemini API"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring a real Gemini API key"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def sample_record():
    return InvoiceRecord.decode(SAMPLE_INVOICE)


@pytest.fixture
def log_store():
    return InMemoryLogStore()


@pytest.fixture
def fake_extractor(sample_record):
    return FakeExtractionClient(result=sample_record)


@pytest.fixture
def client(log_store, fake_extractor, tmp_path, monkeypatch):
    """TestClient with scratch/export dirs under tmp_path and fakes injected"""
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "export_dir", str(tmp_path / "exports"))
    app.dependency_overrides[get_log_store] = lambda: log_store
    app.dependency_overrides[get_extraction_client] = lambda: fake_extractor
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
