"""Offline completion client.

Returns canned, schema-valid responses without any network access. Selected
with ``AI_PROVIDER=example`` for local runs and tests, and a starting point
for new provider adapters (implement BaseCompletionClient and register the
provider in AIServiceFactory).
"""

import json
from typing import ClassVar

from finance_ingest.ai.client_base import BaseCompletionClient


class ExampleClientAdapter(BaseCompletionClient):
    """Returns an empty extraction and one neutral assignment per transaction."""

    EXTRACTION_RESPONSE: ClassVar[dict[str, object]] = {
        "date": "",
        "amount": 0,
        "currency": "SEK",
        "description": "",
        "category": "",
        "subcategory": "",
        "transactions": [],
    }

    def __init__(self, extraction_response: dict[str, object] | None = None) -> None:
        self._extraction_response = extraction_response or self.EXTRACTION_RESPONSE

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
        schema_name: str,
        timeout: float | None = None,
    ) -> str:
        _ = model, temperature, system_prompt, json_schema, timeout
        if schema_name == "categorization_result":
            count = len(json.loads(user_prompt.rsplit("Transactions:\n", 1)[-1]))
            assignments = [
                {
                    "category": "",
                    "subcategory": "",
                    "category_id": 0,
                    "subcategory_id": 0,
                    "confidence": 0.0,
                }
                for _ in range(count)
            ]
            return json.dumps({"assignments": assignments})
        return json.dumps(self._extraction_response)
