import io

from finance_ingest.ai.exceptions import ExtractionError
from finance_ingest.ai.models import Document
from finance_ingest.ai.service import AIService
from finance_ingest.categorization.categorizer import Categorizer
from finance_ingest.database.base import BaseTransactionStore
from finance_ingest.database.exceptions import StoreError, StoreWriteError
from finance_ingest.logging.logger import Log
from finance_ingest.normalization.engine import NormalizationEngine
from finance_ingest.pdf.base import BasePdfExtractor
from finance_ingest.pdf.exceptions import PdfExtractionError
from finance_ingest.pipeline.exceptions import ExtractionFailedError, FileReadError
from finance_ingest.pipeline.file_loader import FileLoader
from finance_ingest.pipeline.models import DiagnosticKind, Transaction, TransactionSource
from finance_ingest.pipeline.pipeline import PipelineContext, PipelineStep
from finance_ingest.statement.base import BaseStatementParser


class LoadFileStep(PipelineStep):
    def __init__(self, file_loader: FileLoader) -> None:
        self._file_loader = file_loader

    def run(self, context: PipelineContext) -> PipelineContext:
        context.raw_bytes = self._file_loader.load(context.file_path)
        Log.info(f"Loaded {len(context.raw_bytes)} bytes from {context.file_path}")
        return context


class ParseStatementStep(PipelineStep):
    def __init__(self, parser: BaseStatementParser, encoding: str = "utf-8-sig") -> None:
        self._parser = parser
        self._encoding = encoding

    def run(self, context: PipelineContext) -> PipelineContext:
        try:
            text = context.raw_bytes.decode(self._encoding)
        except UnicodeDecodeError as exc:
            raise FileReadError(
                f"{context.file_path} is not valid {self._encoding}: {exc}"
            ) from exc

        lines = self._parser.parse(io.StringIO(text, newline=""), context.diagnostics)
        context.transactions = [
            Transaction(
                date=line.date,
                amount=line.amount,
                description=line.description,
                source=TransactionSource.CSV,
                raw_data=line.raw_data,
                reference=line.reference,
            )
            for line in lines
        ]
        context.transactions_found = len(context.transactions)
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        try:
            context.extracted_text = self._pdf_extractor.extract(
                context.raw_bytes, context.token
            )
        except PdfExtractionError as exc:
            raise ExtractionFailedError(
                f"Text extraction failed for {context.file_path}: {exc}"
            ) from exc
        Log.info(
            f"Extracted {len(context.extracted_text)} chars from {context.file_path}"
        )
        return context


class ExtractDocumentStep(PipelineStep):
    def __init__(self, ai_service: AIService | None) -> None:
        self._ai_service = ai_service

    def run(self, context: PipelineContext) -> PipelineContext:
        if self._ai_service is None:
            raise ExtractionFailedError("AI service is not configured")
        document = Document(
            content=context.extracted_text.encode("utf-8"),
            type=context.options.document_type,
            insights=context.options.transaction_insights,
        )
        try:
            context.extraction = self._ai_service.extract_document(
                document, context.analysis_options, context.token
            )
        except ExtractionError as exc:
            raise ExtractionFailedError(
                f"AI extraction failed for {context.file_path}: {exc}"
            ) from exc
        return context


class NormalizeStep(PipelineStep):
    def __init__(self, engine: NormalizationEngine) -> None:
        self._engine = engine

    def run(self, context: PipelineContext) -> PipelineContext:
        context.transactions = self._engine.normalize(context.extraction, context.diagnostics)
        context.transactions_found = len(context.transactions)
        if not context.transactions:
            Log.warning(f"No transactions found in document {context.file_path}")
        return context


class ApplyCategoryHintsStep(PipelineStep):
    def __init__(self, categorizer: Categorizer) -> None:
        self._categorizer = categorizer

    def run(self, context: PipelineContext) -> PipelineContext:
        context.transactions = [
            self._categorizer.apply_raw_hints(tx) for tx in context.transactions
        ]
        return context


class CategorizeBatchStep(PipelineStep):
    def __init__(self, categorizer: Categorizer) -> None:
        self._categorizer = categorizer

    def run(self, context: PipelineContext) -> PipelineContext:
        context.transactions = self._categorizer.categorize(
            context.transactions,
            context.analysis_options,
            context.diagnostics,
            context.token,
        )
        return context


class CategorizeEachStep(PipelineStep):
    def __init__(self, categorizer: Categorizer) -> None:
        self._categorizer = categorizer

    def run(self, context: PipelineContext) -> PipelineContext:
        context.transactions = self._categorizer.categorize_each(
            context.transactions,
            context.analysis_options,
            context.diagnostics,
            context.token,
        )
        return context


class LogSummaryStep(PipelineStep):
    """Logs each transaction with its category names resolved from the store."""

    def __init__(self, store: BaseTransactionStore) -> None:
        self._store = store

    def run(self, context: PipelineContext) -> PipelineContext:
        Log.info(f"Extracted transactions summary: {len(context.transactions)}")
        for number, tx in enumerate(context.transactions, start=1):
            category_name, subcategory_name = self._names(tx)
            Log.info(
                f"Transaction #{number}:",
                description=tx.description,
                amount=str(tx.amount),
                date=tx.date.isoformat(),
                category=category_name,
                subcategory=subcategory_name,
                category_id=tx.category_id,
                subcategory_id=tx.subcategory_id,
            )
        return context

    def _names(self, tx: Transaction) -> tuple[str, str]:
        category_name = subcategory_name = ""
        try:
            if tx.category_id is not None:
                category = self._store.get_category_by_id(tx.category_id)
                category_name = category.name if category else ""
            if tx.subcategory_id is not None:
                subcategory = self._store.get_subcategory_by_id(tx.subcategory_id)
                subcategory_name = subcategory.name if subcategory else ""
        except StoreError as exc:
            Log.debug(f"Category lookup failed: {exc}")
        return category_name, subcategory_name


class PersistTransactionsStep(PipelineStep):
    def __init__(self, store: BaseTransactionStore) -> None:
        self._store = store

    def run(self, context: PipelineContext) -> PipelineContext:
        for tx in context.transactions:
            try:
                transaction_id = self._store.create_transaction(tx)
            except StoreWriteError as exc:
                Log.error(f"Failed to store transaction: {exc}", description=tx.description)
                context.diagnostics.add(
                    DiagnosticKind.STORE_WRITE_FAILED,
                    str(exc),
                    description=tx.description,
                    amount=str(tx.amount),
                    date=tx.date.isoformat(),
                )
                continue
            context.stored_ids.append(transaction_id)
            Log.info(
                "Transaction created successfully",
                id=transaction_id,
                description=tx.description,
                amount=str(tx.amount),
                date=tx.date.isoformat(),
            )
        return context
