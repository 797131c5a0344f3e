"""Entry point that extracts PDF attachments from a folder of .eml files."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from dotenv import load_dotenv

# Ensure project root is on sys.path when running as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdf_from_eml.batch import run_batch
from pdf_from_eml.config import Settings
from pdf_from_eml.extractor import PdfExtractor
from pdf_from_eml.ledger import ExtractionLedger

load_dotenv()

logger = logging.getLogger("pdf_from_eml")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Not an integer: {value}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract PDF attachments from .eml files.")
    parser.add_argument(
        "--input", "-input", type=Path, help="Path to the input folder containing .eml files"
    )
    parser.add_argument(
        "--output",
        "-output",
        type=Path,
        help="Path to the output folder for extracted PDFs (default: extracted_pdfs)",
    )
    parser.add_argument("--workers", type=positive_int, help="Number of EML files processed in parallel")
    parser.add_argument(
        "--nested",
        action="store_true",
        default=None,
        help="Also look inside multipart parts nested in other multipart parts",
    )
    parser.add_argument("--ledger", type=Path, help="SQLite file recording processed EML files")
    parser.add_argument(
        "--skip-processed",
        action="store_true",
        help="Skip EML files the ledger already lists (requires --ledger or LEDGER_DB)",
    )
    parser.add_argument("--log-level", help="Logging level (default: INFO)")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings()
    configure_logging(args.log_level or settings.log_level)

    input_dir = args.input or settings.input_dir
    output_dir = args.output or settings.output_dir
    workers = args.workers or settings.extract_workers
    nested = settings.nested_multipart if args.nested is None else args.nested
    ledger_path = args.ledger or settings.ledger_db

    if input_dir is None:
        raise SystemExit("Error: Input directory is required. Use -input flag.")
    if not input_dir.is_dir():
        raise SystemExit(f"Error: Input directory '{input_dir}' does not exist.")
    if args.skip_processed and ledger_path is None:
        raise SystemExit("Error: --skip-processed needs a ledger (--ledger or LEDGER_DB).")

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SystemExit(f"Error creating output directory '{output_dir}': {exc}") from exc

    print(f"Scanning '{input_dir}' for .eml files and extracting PDFs to '{output_dir}'")

    extractor = PdfExtractor(output_dir, recursive=nested)
    ledger = ExtractionLedger(ledger_path) if ledger_path else None
    summary = run_batch(
        input_dir,
        extractor,
        extensions=settings.eml_extensions,
        workers=workers,
        ledger=ledger,
        skip_processed=args.skip_processed,
    )

    logger.info(
        "Run complete: scanned=%s skipped=%s failed=%s extracted=%s warnings=%s",
        summary.files_scanned,
        summary.files_skipped,
        len(summary.failed),
        summary.extracted_count,
        summary.warning_count,
    )
    print(f"Finished! Extracted {summary.extracted_count} PDF(s).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
