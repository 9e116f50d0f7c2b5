import json
from datetime import date
from decimal import Decimal

from finance_ingest.ai.example_client_adapter import ExampleClientAdapter
from finance_ingest.ai.models import AnalysisOptions, Document
from finance_ingest.ai.service import AIService
from finance_ingest.pipeline.models import Transaction, TransactionSource


def _tx(description: str) -> Transaction:
    return Transaction(
        date=date(2023, 1, 5),
        amount=Decimal("-1"),
        description=description,
        source=TransactionSource.CSV,
    )


class TestExampleClientAdapter:
    def test_default_extraction_is_empty(self) -> None:
        raw = ExampleClientAdapter().create_chat_completion(
            model="example",
            temperature=0.0,
            system_prompt="s",
            user_prompt="u",
            json_schema={},
            schema_name="extraction_result",
        )
        assert json.loads(raw)["transactions"] == []

    def test_custom_extraction_response(self) -> None:
        payload = {"description": "Telia", "amount": 99, "date": "2023-01-31"}
        service = AIService(client=ExampleClientAdapter(payload), model="example")
        result = service.extract_document(Document(content=b"text"))
        assert result.description == "Telia"
        assert result.amount == Decimal("99")

    def test_one_neutral_assignment_per_transaction(self) -> None:
        service = AIService(client=ExampleClientAdapter(), model="example")
        assignments = service.batch_analyze_transactions(
            [_tx("A"), _tx("B"), _tx("C")],
            AnalysisOptions(),
        )
        assert len(assignments) == 3
        assert all(a.category_id == 0 for a in assignments)
