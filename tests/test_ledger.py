from pathlib import Path

from pdf_from_eml.ledger import ExtractionLedger
from pdf_from_eml.models import ExtractedFile, ExtractionResult
from pdf_from_eml.utils import sha256_hex


def test_ledger_records_processed_files(tmp_path):
    ledger = ExtractionLedger(tmp_path / "nested" / "ledger.db")
    checksum = sha256_hex(b"raw message")
    result = ExtractionResult(warnings=["msg.eml part 2: something"])
    result.add_file(ExtractedFile(path=Path("/out/a.pdf"), size=10, part_label="1", checksum="abc"))

    assert not ledger.seen(checksum)
    ledger.record(eml_path=Path("/in/msg.eml"), eml_sha256=checksum, result=result)

    assert ledger.seen(checksum)
    assert ledger.output_files(checksum) == ["/out/a.pdf"]
    row = ledger.db[ExtractionLedger.TABLE].get(checksum)
    assert row["eml_path"] == "/in/msg.eml"
    assert row["extracted_count"] == 1
    assert row["warning_count"] == 1


def test_ledger_upserts_and_survives_reopen(tmp_path):
    db_path = tmp_path / "ledger.db"
    checksum = sha256_hex(b"message")
    ExtractionLedger(db_path).record(eml_path=Path("a.eml"), eml_sha256=checksum, result=ExtractionResult())

    reopened = ExtractionLedger(db_path)
    reopened.record(eml_path=Path("b.eml"), eml_sha256=checksum, result=ExtractionResult())

    assert reopened.db[ExtractionLedger.TABLE].count == 1
    assert reopened.db[ExtractionLedger.TABLE].get(checksum)["eml_path"] == "b.eml"
    assert reopened.output_files(checksum) == []
    assert reopened.output_files("unknown") == []
