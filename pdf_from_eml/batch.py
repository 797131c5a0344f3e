"""Run the extractor over every EML file below a directory."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterator, Sequence

from .extractor import PdfExtractor
from .ledger import ExtractionLedger
from .models import BatchSummary, ExtractionResult
from .utils import has_extension, sha256_hex

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".eml",)


def _log_walk_error(error: OSError) -> None:
    logger.error("Error accessing path %r: %s", error.filename, error)


def iter_eml_files(root: Path, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> Iterator[Path]:
    """Yield matching files below ``root`` in a stable, sorted order."""
    suffixes = tuple(ext.lower() for ext in extensions)
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if has_extension(path, suffixes):
                yield path


def run_batch(
    input_dir: Path,
    extractor: PdfExtractor,
    *,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    workers: int = 1,
    ledger: ExtractionLedger | None = None,
    skip_processed: bool = False,
) -> BatchSummary:
    """Extract PDFs from every EML file under ``input_dir``.

    Files are independent units of work; with ``workers > 1`` they are
    processed on a thread pool. The ledger is only used from this thread.
    Unreadable messages come back from the extractor as warnings; only a
    file that cannot be hashed for the ledger lands in ``summary.failed``.
    """
    summary = BatchSummary()
    pending: list[tuple[Path, str | None]] = []

    for eml_path in iter_eml_files(input_dir, extensions):
        checksum = None
        if ledger is not None:
            try:
                checksum = sha256_hex(eml_path.read_bytes())
            except OSError as exc:
                logger.error("Error processing %s: %s", eml_path, exc)
                summary.failed[eml_path] = str(exc)
                continue
            if skip_processed and ledger.seen(checksum):
                logger.info("Already processed %s; skipping", eml_path)
                summary.files_skipped += 1
                continue
        pending.append((eml_path, checksum))

    def finish(eml_path: Path, checksum: str | None, result: ExtractionResult) -> None:
        summary.add(eml_path, result)
        if ledger is not None and checksum is not None:
            ledger.record(eml_path=eml_path, eml_sha256=checksum, result=result)

    if workers <= 1:
        for eml_path, checksum in pending:
            logger.info("Processing EML file: %s", eml_path)
            finish(eml_path, checksum, extractor.extract_file(eml_path))
        return summary

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {
            pool.submit(extractor.extract_file, eml_path): (eml_path, checksum)
            for eml_path, checksum in pending
        }
        logger.info("Processing %d EML file(s) with %d workers", len(futures), workers)
        for future in as_completed(futures):
            eml_path, checksum = futures[future]
            finish(eml_path, checksum, future.result())
    return summary
