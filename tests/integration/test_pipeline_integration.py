"""End-to-end runs with real adapters and the offline AI client; the store is mocked."""

from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from finance_ingest.ai.example_client_adapter import ExampleClientAdapter
from finance_ingest.ai.service import AIService
from finance_ingest.config.settings import Settings
from finance_ingest.database.base import BaseTransactionStore
from finance_ingest.pdf.pdfplumber_adapter import PdfPlumberAdapter
from finance_ingest.pipeline.exceptions import ExtractionFailedError
from finance_ingest.pipeline.orchestrator import build_pipeline

EXTRACTION = {
    "date": "2023-01-31",
    "amount": -300.0,
    "currency": "SEK",
    "description": "Kvitto",
    "category": "",
    "subcategory": "",
    "transactions": [
        {"beskrivning": "Mjölk", "belopp": "-19,90", "datum": "2023-01-05"},
        {"description": "Bröd", "amount": -35.5},
        {"description": "", "amount": -1, "date": "2023-01-05"},
    ],
}


@pytest.fixture()
def store() -> MagicMock:
    store = MagicMock(spec=BaseTransactionStore)
    store.list_categories.return_value = []
    store.create_transaction.side_effect = range(1, 1000)
    store.get_category_by_id.return_value = None
    store.get_subcategory_by_id.return_value = None
    return store


def _pipeline(store: MagicMock):  # type: ignore[no-untyped-def]
    service = AIService(client=ExampleClientAdapter(EXTRACTION), model="example")
    return build_pipeline(
        Settings(ai_provider="example", pdf_engine="pdfplumber"),
        store,
        ai_service=service,
        pdf_extractor=PdfPlumberAdapter(),
    )


class TestPipelineIntegration:
    def test_directory_with_pdf_and_csv(
        self,
        tmp_path: Path,
        sample_pdf_bytes: bytes,
        seb_csv_text: str,
        store: MagicMock,
    ) -> None:
        (tmp_path / "receipt.pdf").write_bytes(sample_pdf_bytes)
        (tmp_path / "seb.csv").write_text(seb_csv_text, encoding="utf-8")

        receipt, statement = _pipeline(store).process_documents(tmp_path)

        assert receipt.ok
        assert receipt.transactions_found == 2
        assert len(receipt.warnings) == 1
        assert statement.ok
        assert statement.transactions_found == 2

        stored = [call.args[0] for call in store.create_transaction.call_args_list]
        assert [tx.description for tx in stored] == [
            "Mjölk",
            "Bröd",
            "ICA Supermarket",
            "Lön",
        ]
        assert stored[0].amount == Decimal("-19.90")
        assert stored[1].date.isoformat() == "2023-01-31"
        assert all(tx.ai_analysis is not None for tx in stored)
        assert all(tx.category_id is None for tx in stored)

    def test_corrupt_pdf_in_directory(
        self,
        tmp_path: Path,
        seb_csv_text: str,
        store: MagicMock,
    ) -> None:
        (tmp_path / "broken.pdf").write_bytes(b"not a pdf")
        (tmp_path / "seb.csv").write_text(seb_csv_text, encoding="utf-8")

        broken, statement = _pipeline(store).process_documents(tmp_path)

        assert isinstance(broken.error, ExtractionFailedError)
        assert statement.error is None
        assert statement.transactions_stored == 2
