import argparse
import sys

from finance_ingest.config.settings import Settings
from finance_ingest.database.connection import close_pool, init_pool
from finance_ingest.database.repositories.transaction_repository import TransactionRepository
from finance_ingest.logging.logger import Log
from finance_ingest.pipeline.cancellation import CancellationToken
from finance_ingest.pipeline.models import ProcessOptions
from finance_ingest.pipeline.orchestrator import build_pipeline


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="finance-ingest",
        description="Import transactions from PDF documents and bank CSV exports.",
    )
    parser.add_argument("path", help="file or directory to import")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: settings -> logging -> pool -> pipeline -> per-file summary."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        pipeline = build_pipeline(settings, TransactionRepository())
        options = ProcessOptions(
            document_type=settings.document_type,
            transaction_insights=settings.transaction_insights,
            category_insights=settings.category_insights,
        )
        token = CancellationToken(settings.processing_deadline_seconds)
        try:
            results = pipeline.process_documents(args.path, options, token)
        except Exception as exc:
            Log.error(f"Import failed for {args.path}: {exc}")
            return 1

        failed = 0
        for result in results:
            if result.error is not None:
                failed += 1
                Log.error(f"{result.file_path}: {result.error}")
                continue
            Log.info(
                f"{result.file_path}: {result.transactions_found} transactions found",
                stored=result.transactions_stored,
                warnings=len(result.warnings),
            )
        Log.info(f"Processed {len(results)} files, {failed} failed")
        return 1 if failed else 0
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
