from pathlib import Path

import pytest
from pydantic import ValidationError

from pdf_from_eml.config import Settings, _split_list

ENV_VARS = [
    "INPUT_DIR",
    "OUTPUT_DIR",
    "EML_EXTENSIONS",
    "EXTRACT_WORKERS",
    "NESTED_MULTIPART",
    "LEDGER_DB",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.input_dir is None
    assert settings.output_dir == Path("extracted_pdfs")
    assert settings.eml_extensions == (".eml",)
    assert settings.extract_workers == 1
    assert settings.nested_multipart is False
    assert settings.ledger_db is None
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("INPUT_DIR", str(tmp_path))
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.setenv("EML_EXTENSIONS", "eml; .MSG,")
    monkeypatch.setenv("EXTRACT_WORKERS", "4")
    monkeypatch.setenv("NESTED_MULTIPART", "true")
    monkeypatch.setenv("LEDGER_DB", str(tmp_path / "ledger.db"))
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.input_dir == tmp_path
    assert settings.output_dir == tmp_path / "out"
    assert settings.eml_extensions == (".eml", ".msg")
    assert settings.extract_workers == 4
    assert settings.nested_multipart is True
    assert settings.ledger_db == tmp_path / "ledger.db"
    assert settings.log_level == "DEBUG"


def test_empty_strings_become_none(monkeypatch):
    monkeypatch.setenv("INPUT_DIR", "  ")
    monkeypatch.setenv("LEDGER_DB", "")
    settings = Settings(_env_file=None)
    assert settings.input_dir is None
    assert settings.ledger_db is None


def test_workers_must_be_positive(monkeypatch):
    monkeypatch.setenv("EXTRACT_WORKERS", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_split_list():
    assert _split_list(" a; B ,, c ") == ["a", "b", "c"]
    assert _split_list(["X", " "], coerce_lower=False) == ["X"]
    assert _split_list(None) == []
