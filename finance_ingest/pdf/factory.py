from finance_ingest.config.settings import Settings
from finance_ingest.pdf.base import BasePdfExtractor
from finance_ingest.pdf.pdfplumber_adapter import PdfPlumberAdapter
from finance_ingest.pdf.pdftotext_adapter import PdfToTextAdapter


class PdfExtractorFactory:
    """Creates the correct PDF extractor based on settings."""

    ENGINES = ("pdftotext", "pdfplumber")

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.lower()
        if engine == "pdftotext":
            return PdfToTextAdapter(binary=settings.pdftotext_binary)
        if engine == "pdfplumber":
            return PdfPlumberAdapter()
        raise ValueError(f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ENGINES)}")
