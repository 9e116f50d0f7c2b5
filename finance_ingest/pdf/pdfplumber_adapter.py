import io

import pdfplumber

from finance_ingest.pdf.base import BasePdfExtractor
from finance_ingest.pdf.exceptions import PdfExtractionError
from finance_ingest.pipeline.cancellation import CancellationToken
from finance_ingest.pipeline.exceptions import OperationCancelledError


class PdfPlumberAdapter(BasePdfExtractor):
    """Extracts layout-preserving text in-process using pdfplumber."""

    def extract(self, pdf_bytes: bytes, token: CancellationToken | None = None) -> str:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = []
                for page in pdf.pages:
                    if token is not None:
                        token.raise_if_cancelled()
                    pages.append(page.extract_text(layout=True) or "")
        except OperationCancelledError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc

        text = "\n".join(pages).strip()
        if not text:
            raise PdfExtractionError("No text content found in PDF")
        return text
