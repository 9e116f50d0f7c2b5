from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from finance_ingest.ai.models import AnalysisOptions, ExtractionResult
from finance_ingest.pipeline.cancellation import CancellationToken
from finance_ingest.pipeline.models import (
    Diagnostics,
    ProcessingResult,
    ProcessOptions,
    Transaction,
)


@dataclass(slots=True)
class PipelineContext:
    """Working set of one file; discarded once its ProcessingResult is built."""

    file_path: Path
    options: ProcessOptions
    analysis_options: AnalysisOptions
    token: CancellationToken
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    raw_bytes: bytes = b""
    extracted_text: str = ""
    extraction: ExtractionResult | None = None
    transactions: list[Transaction] = field(default_factory=list)
    transactions_found: int = 0
    stored_ids: list[int] = field(default_factory=list)

    def to_result(self, error: Exception | None = None) -> ProcessingResult:
        return ProcessingResult(
            file_path=str(self.file_path),
            transactions_found=0 if error is not None else self.transactions_found,
            transactions_stored=len(self.stored_ids),
            error=error,
            warnings=self.diagnostics.snapshot(),
        )


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError


class FileProcessor:
    """Runs an ordered list of steps over one file's context."""

    def __init__(self, steps: list[PipelineStep]) -> None:
        self._steps = steps

    def run(self, context: PipelineContext) -> PipelineContext:
        for step in self._steps:
            context.token.raise_if_cancelled()
            context = step.run(context)
        return context
