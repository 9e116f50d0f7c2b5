"""AI-powered document extraction and transaction categorization."""

import json
from pathlib import Path

from finance_ingest.ai.client_base import BaseCompletionClient
from finance_ingest.ai.exceptions import AIServiceError, CategorizationError, ExtractionError
from finance_ingest.ai.models import (
    DOCUMENT_TYPES,
    AnalysisOptions,
    CategoryAssignment,
    CategoryOption,
    Document,
    ExtractionResult,
)
from finance_ingest.ai.prompt_loader import load_json_schema, load_prompt_template
from finance_ingest.ai.response_parser import build_assignments, build_extraction, parse_json
from finance_ingest.logging.logger import Log
from finance_ingest.pipeline.cancellation import CancellationToken
from finance_ingest.pipeline.models import Transaction


class AIService:
    """Extracts transactions from document text and categorizes transactions."""

    def __init__(
        self,
        *,
        client: BaseCompletionClient,
        model: str,
        temperature: float = 0.0,
        timeout_seconds: float | None = None,
        prompt_dir: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._timeout_seconds = timeout_seconds
        self._extraction_system = load_prompt_template("extraction_system_prompt", prompt_dir)
        self._extraction_template = load_prompt_template("extraction_prompt", prompt_dir)
        self._extraction_schema = load_json_schema("extraction_schema", prompt_dir)
        self._categorization_system = load_prompt_template(
            "categorization_system_prompt", prompt_dir
        )
        self._categorization_template = load_prompt_template("categorization_prompt", prompt_dir)
        self._categorization_schema = load_json_schema("categorization_schema", prompt_dir)

    def extract_document(
        self,
        document: Document,
        options: AnalysisOptions | None = None,
        token: CancellationToken | None = None,
    ) -> ExtractionResult:
        """Extract transactions from a document's text content.

        Raises:
            ExtractionError: on empty input, unsupported type, provider or parse failure.
        """
        if not document.content:
            raise ExtractionError("Empty document content")
        if document.type not in DOCUMENT_TYPES:
            raise ExtractionError(f"Unsupported document type: {document.type}")

        content = document.content.decode("utf-8", errors="replace")
        Log.info(
            "Starting document extraction",
            document_type=document.type,
            content_length=len(content),
        )
        prompt = self._extraction_template.format(
            document_type=document.type.replace("_", " "),
            runtime_insights=document.insights or "(none)",
            categories=_render_categories(options.categories if options else ()),
            json_schema=self._extraction_schema,
            content=content,
        )
        Log.debug(f"Extraction prompt:\n{prompt}")

        raw_response = self._call_ai(
            ExtractionError,
            system_prompt=self._extraction_system,
            user_prompt=prompt,
            schema=self._extraction_schema,
            schema_name="extraction_result",
            token=token,
        )
        Log.debug(f"AI raw extraction response:\n{raw_response}")

        try:
            extraction = build_extraction(parse_json(raw_response, ExtractionError), content)
        except ExtractionError:
            raise
        except AIServiceError as exc:
            raise ExtractionError(str(exc)) from exc

        Log.info(
            f"Document extraction complete: {len(extraction.transactions)} line items",
            document_type=document.type,
        )
        return extraction

    def analyze_transaction(
        self,
        transaction: Transaction,
        options: AnalysisOptions,
        token: CancellationToken | None = None,
    ) -> CategoryAssignment:
        """Categorize a single transaction.

        Raises:
            CategorizationError: on provider or parse failure, or an empty answer.
        """
        assignments = self.batch_analyze_transactions([transaction], options, token)
        if not assignments:
            raise CategorizationError("AI returned no assignment for transaction")
        return assignments[0]

    def batch_analyze_transactions(
        self,
        transactions: list[Transaction],
        options: AnalysisOptions,
        token: CancellationToken | None = None,
    ) -> list[CategoryAssignment]:
        """Categorize transactions in one call; result is index-correlated with input.

        The result may be shorter than the input when the provider answers
        with fewer entries; extra entries are discarded.

        Raises:
            CategorizationError: on provider or parse failure.
        """
        if not transactions:
            Log.warning("No transactions provided for analysis")
            return []

        Log.info(
            "Starting batch transaction analysis",
            transaction_count=len(transactions),
            document_type=options.document_type,
        )
        prompt = self._categorization_template.format(
            document_type=options.document_type.replace("_", " "),
            runtime_insights=options.runtime_insights or "(none)",
            categories=_render_categories(options.categories),
            json_schema=self._categorization_schema,
            transactions=_render_transactions(transactions),
        )
        Log.debug(f"Categorization prompt:\n{prompt}")

        raw_response = self._call_ai(
            CategorizationError,
            system_prompt=self._categorization_system,
            user_prompt=prompt,
            schema=self._categorization_schema,
            schema_name="categorization_result",
            token=token,
        )
        Log.debug(f"AI raw categorization response:\n{raw_response}")

        try:
            assignments = build_assignments(parse_json(raw_response, CategorizationError))
        except CategorizationError:
            raise
        except AIServiceError as exc:
            raise CategorizationError(str(exc)) from exc

        if len(assignments) != len(transactions):
            Log.warning(
                "Mismatch between transaction count and assignment count",
                transaction_count=len(transactions),
                assignment_count=len(assignments),
            )
        return assignments[: len(transactions)]

    def _call_ai(
        self,
        error_cls: type[AIServiceError],
        *,
        system_prompt: str,
        user_prompt: str,
        schema: str,
        schema_name: str,
        token: CancellationToken | None,
    ) -> str:
        """Send one blocking completion request.

        The request itself is only bounded by the token's deadline, passed on
        as the HTTP timeout. An explicit cancel() is observed before the call
        and once it returns, in which case the response is discarded.
        """
        timeout = self._timeout_seconds
        if token is not None:
            token.raise_if_cancelled()
            timeout = token.timeout(timeout)
        try:
            response = self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                json_schema=json.loads(schema),
                schema_name=schema_name,
                timeout=timeout,
            )
        except error_cls:
            raise
        except AIServiceError as exc:
            Log.error(f"AI provider request failed: {exc}", model=self._model)
            raise error_cls(str(exc)) from exc
        if token is not None:
            token.raise_if_cancelled()
        return response


def _render_categories(categories: tuple[CategoryOption, ...]) -> str:
    if not categories:
        return "(no categories configured)"
    lines = []
    for category in categories:
        lines.append(f"- [{category.id}] {category.name}")
        lines.extend(f"    - [{sub_id}] {sub_name}" for sub_id, sub_name in category.subcategories)
    return "\n".join(lines)


def _render_transactions(transactions: list[Transaction]) -> str:
    rows = [
        {
            "index": index,
            "description": tx.description,
            "amount": str(tx.amount),
            "date": tx.date.isoformat(),
            "raw_data": tx.raw_data,
        }
        for index, tx in enumerate(transactions)
    ]
    return json.dumps(rows, ensure_ascii=False, indent=2, default=str)
