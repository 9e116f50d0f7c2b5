"""Walks an input path and runs each file through its format's steps.

Pipeline per file:
    PDF: load -> extract text -> AI extract -> normalize -> category hints
         -> batch categorize -> summary -> persist
    CSV: load -> parse statement -> category hints -> categorize each
         -> summary -> persist
"""

import os
import stat
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from finance_ingest.ai.factory import AIServiceFactory
from finance_ingest.ai.models import AnalysisOptions, CategoryOption
from finance_ingest.ai.service import AIService
from finance_ingest.categorization.categorizer import Categorizer
from finance_ingest.config.settings import Settings
from finance_ingest.database.base import BaseTransactionStore
from finance_ingest.database.exceptions import StoreError
from finance_ingest.logging.logger import Log
from finance_ingest.normalization.engine import NormalizationEngine
from finance_ingest.pdf.base import BasePdfExtractor
from finance_ingest.pdf.factory import PdfExtractorFactory
from finance_ingest.pipeline.cancellation import CancellationToken
from finance_ingest.pipeline.exceptions import (
    OperationCancelledError,
    PathAccessError,
    UnsupportedFileTypeError,
)
from finance_ingest.pipeline.file_loader import FileLoader
from finance_ingest.pipeline.models import ProcessingResult, ProcessOptions, TransactionSource
from finance_ingest.pipeline.pipeline import FileProcessor, PipelineContext, PipelineStep
from finance_ingest.pipeline.steps import (
    ApplyCategoryHintsStep,
    CategorizeBatchStep,
    CategorizeEachStep,
    ExtractDocumentStep,
    ExtractTextStep,
    LoadFileStep,
    LogSummaryStep,
    NormalizeStep,
    ParseStatementStep,
    PersistTransactionsStep,
)
from finance_ingest.statement.seb_adapter import SebCsvParser


class Pipeline:
    """Dispatches files to per-format processors and aggregates their results."""

    def __init__(
        self,
        processors: dict[str, FileProcessor],
        store: BaseTransactionStore | None = None,
        max_workers: int = 1,
    ) -> None:
        self._processors = {ext.lower(): processor for ext, processor in processors.items()}
        self._store = store
        self._max_workers = max(1, max_workers)

    def process_documents(
        self,
        path: str | Path,
        options: ProcessOptions | None = None,
        token: CancellationToken | None = None,
    ) -> list[ProcessingResult]:
        """Process a single file or every file below a directory.

        A single file's failure is raised to the caller. In directory mode each
        failure is recorded on that file's result and the walk continues.

        Raises:
            PathAccessError: if the input path cannot be accessed.
            OperationCancelledError: if the token is cancelled.
        """
        path = Path(path)
        options = options or ProcessOptions()
        token = token or CancellationToken()

        try:
            is_dir = stat.S_ISDIR(path.stat().st_mode)
        except OSError as exc:
            raise PathAccessError(f"Cannot access {path}: {exc}") from exc

        analysis_options = self._analysis_options(options)

        if not is_dir:
            return [self.process_file(path, options, token, analysis_options)]

        entries = self._walk(path)
        files = [entry for entry in entries if isinstance(entry, Path)]
        Log.info(f"Found {len(files)} files under {path}")

        def run(file_path: Path) -> ProcessingResult:
            return self._process_isolated(file_path, options, token, analysis_options)

        if self._max_workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                processed = iter(list(executor.map(run, files)))
        else:
            processed = (run(file_path) for file_path in files)

        return [
            next(processed) if isinstance(entry, Path) else entry
            for entry in entries
        ]

    def process_file(
        self,
        path: str | Path,
        options: ProcessOptions | None = None,
        token: CancellationToken | None = None,
        analysis_options: AnalysisOptions | None = None,
    ) -> ProcessingResult:
        """Process one file and return its result.

        Raises:
            UnsupportedFileTypeError: if no processor handles the extension.
            PipelineError: or a package error, if the file cannot be processed.
        """
        path = Path(path)
        options = options or ProcessOptions()
        token = token or CancellationToken()
        if analysis_options is None:
            analysis_options = self._analysis_options(options)

        processor = self._processor_for(path)
        context = self._new_context(path, options, token, analysis_options)
        return self._finish(processor.run(context))

    def _process_isolated(
        self,
        path: Path,
        options: ProcessOptions,
        token: CancellationToken,
        analysis_options: AnalysisOptions,
    ) -> ProcessingResult:
        """Process one file of a directory walk; failures become the file's result."""
        try:
            processor = self._processor_for(path)
        except UnsupportedFileTypeError as exc:
            Log.error(f"Failed to process {path}: {exc}")
            return ProcessingResult(file_path=str(path), error=exc)

        context = self._new_context(path, options, token, analysis_options)
        try:
            return self._finish(processor.run(context))
        except OperationCancelledError:
            raise
        except Exception as exc:
            Log.error(f"Failed to process {path}: {exc}")
            return context.to_result(error=exc)

    def _processor_for(self, path: Path) -> FileProcessor:
        processor = self._processors.get(path.suffix.lower())
        if processor is None:
            raise UnsupportedFileTypeError(f"Unsupported file type: {path.suffix or path.name}")
        return processor

    @staticmethod
    def _new_context(
        path: Path,
        options: ProcessOptions,
        token: CancellationToken,
        analysis_options: AnalysisOptions,
    ) -> PipelineContext:
        Log.info(f"Processing file {path}")
        return PipelineContext(
            file_path=path,
            options=options,
            analysis_options=analysis_options,
            token=token,
        )

    @staticmethod
    def _finish(context: PipelineContext) -> ProcessingResult:
        result = context.to_result()
        Log.info(
            f"Finished {context.file_path}",
            transactions_found=result.transactions_found,
            transactions_stored=result.transactions_stored,
            warnings=len(result.warnings),
        )
        return result

    @staticmethod
    def _walk(root: Path) -> list[Path | ProcessingResult]:
        """List files below root in sorted order; unreadable directories become error results."""
        entries: list[Path | ProcessingResult] = []

        def on_error(exc: OSError) -> None:
            Log.error(f"Cannot read directory {exc.filename}: {exc}")
            entries.append(
                ProcessingResult(
                    file_path=str(exc.filename),
                    error=PathAccessError(f"Cannot read directory {exc.filename}: {exc}"),
                )
            )

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            dirnames.sort()
            entries.extend(Path(dirpath) / name for name in sorted(filenames))
        return entries

    def _analysis_options(self, options: ProcessOptions) -> AnalysisOptions:
        return AnalysisOptions(
            document_type=options.document_type,
            runtime_insights=options.runtime_insights,
            categories=self._load_categories(),
        )

    def _load_categories(self) -> tuple[CategoryOption, ...]:
        if self._store is None:
            return ()
        try:
            catalogue = self._store.list_categories()
        except StoreError as exc:
            Log.warning(f"Could not load category catalogue: {exc}")
            return ()
        return tuple(
            CategoryOption(
                id=category.id,
                name=category.name,
                subcategories=tuple((sub.id, sub.name) for sub in subcategories),
            )
            for category, subcategories in catalogue
        )


def build_pipeline(
    settings: Settings,
    store: BaseTransactionStore,
    ai_service: AIService | None = None,
    pdf_extractor: BasePdfExtractor | None = None,
) -> Pipeline:
    """Build a Pipeline with the PDF and CSV processors wired from settings."""
    if ai_service is None:
        ai_service = AIServiceFactory.create(settings)
    if pdf_extractor is None:
        pdf_extractor = PdfExtractorFactory.create(settings)

    file_loader = FileLoader()
    categorizer = Categorizer(ai_service)

    pdf_steps: list[PipelineStep] = [
        LoadFileStep(file_loader),
        ExtractTextStep(pdf_extractor),
        ExtractDocumentStep(ai_service),
        NormalizeStep(NormalizationEngine(TransactionSource.PDF)),
        ApplyCategoryHintsStep(categorizer),
    ]
    csv_steps: list[PipelineStep] = [
        LoadFileStep(file_loader),
        ParseStatementStep(SebCsvParser(settings.csv_delimiter), settings.csv_encoding),
        ApplyCategoryHintsStep(categorizer),
    ]
    if settings.categorization_enabled:
        pdf_steps.append(CategorizeBatchStep(categorizer))
        csv_steps.append(CategorizeEachStep(categorizer))
    else:
        Log.info("Categorization disabled")
    for steps in (pdf_steps, csv_steps):
        steps.append(LogSummaryStep(store))
        steps.append(PersistTransactionsStep(store))

    return Pipeline(
        processors={
            ".pdf": FileProcessor(pdf_steps),
            ".csv": FileProcessor(csv_steps),
        },
        store=store,
        max_workers=settings.max_workers,
    )
