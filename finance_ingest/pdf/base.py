from abc import ABC, abstractmethod

from finance_ingest.pipeline.cancellation import CancellationToken


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes, token: CancellationToken | None = None) -> str:
        """Extract layout-preserving plain text from PDF bytes.

        Args:
            pdf_bytes: Raw PDF file content.
            token: Cancellation token bounding how long extraction may run.

        Returns:
            Extracted text, never empty.

        Raises:
            PdfExtractionError: if extraction fails or yields no text.
            OperationCancelledError: if the token is cancelled or its deadline passes.
        """
