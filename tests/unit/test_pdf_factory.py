import pytest

from finance_ingest.config.settings import Settings
from finance_ingest.pdf.factory import PdfExtractorFactory
from finance_ingest.pdf.pdfplumber_adapter import PdfPlumberAdapter
from finance_ingest.pdf.pdftotext_adapter import PdfToTextAdapter


class TestPdfExtractorFactory:
    def test_creates_pdftotext_adapter(self) -> None:
        adapter = PdfExtractorFactory.create(Settings(pdf_engine="pdftotext"))
        assert isinstance(adapter, PdfToTextAdapter)

    def test_creates_pdfplumber_adapter(self) -> None:
        adapter = PdfExtractorFactory.create(Settings(pdf_engine="pdfplumber"))
        assert isinstance(adapter, PdfPlumberAdapter)

    def test_is_case_insensitive(self) -> None:
        adapter = PdfExtractorFactory.create(Settings(pdf_engine="PdfPlumber"))
        assert isinstance(adapter, PdfPlumberAdapter)

    def test_raises_for_unknown_engine(self) -> None:
        with pytest.raises(ValueError, match="Unknown PDF engine"):
            PdfExtractorFactory.create(Settings(pdf_engine="unknown"))
