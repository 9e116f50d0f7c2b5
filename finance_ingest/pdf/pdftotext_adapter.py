import shutil
import subprocess
import tempfile
from pathlib import Path

from finance_ingest.logging.logger import Log
from finance_ingest.pdf.base import BasePdfExtractor
from finance_ingest.pdf.exceptions import PdfExtractionError
from finance_ingest.pipeline.cancellation import CancellationToken
from finance_ingest.pipeline.exceptions import OperationCancelledError


class PdfToTextAdapter(BasePdfExtractor):
    """Extracts text by running poppler's pdftotext on a temporary copy.

    With a token the process is polled and killed as soon as the token is
    cancelled, explicitly or by its deadline.
    """

    ARGS = ("-layout", "-nopgbrk")
    POLL_INTERVAL = 0.1

    def __init__(self, binary: str = "pdftotext") -> None:
        self._binary = binary

    def extract(self, pdf_bytes: bytes, token: CancellationToken | None = None) -> str:
        executable = shutil.which(self._binary)
        if executable is None:
            raise PdfExtractionError(
                f"{self._binary} is not installed. Please install poppler-utils"
            )
        if token is not None:
            token.raise_if_cancelled()

        with tempfile.TemporaryDirectory(prefix="finance-ingest-") as tmp_dir:
            pdf_path = Path(tmp_dir) / "document.pdf"
            pdf_path.write_bytes(pdf_bytes)
            command = [executable, *self.ARGS, str(pdf_path), "-"]
            Log.debug(f"Running {' '.join(command)}")
            with subprocess.Popen(
                command, stdout=subprocess.PIPE, stderr=subprocess.PIPE
            ) as process:
                stdout, stderr = self._communicate(process, token)

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise PdfExtractionError(
                f"{self._binary} exited with status {process.returncode}: {message}"
            )
        text = stdout.decode("utf-8", errors="replace")
        if not text.strip():
            raise PdfExtractionError("No text content found in PDF")
        return text

    def _communicate(
        self,
        process: subprocess.Popen[bytes],
        token: CancellationToken | None,
    ) -> tuple[bytes, bytes]:
        timeout = self.POLL_INTERVAL if token is not None else None
        while True:
            try:
                return process.communicate(timeout=timeout)
            except subprocess.TimeoutExpired as exc:
                if token is None or not token.cancelled:
                    continue
                process.kill()
                process.communicate()
                raise OperationCancelledError(
                    f"{self._binary} was cancelled before it finished"
                ) from exc
