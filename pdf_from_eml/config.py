"""Configuration management for the EML→PDF extractor."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env early so BaseSettings can pick values up seamlessly.
load_dotenv()


def _split_list(value: str | Sequence[str] | None, coerce_lower: bool = True) -> list[str]:
    """Turn delimiter-separated env strings into cleaned lists."""
    if value is None:
        return []
    if isinstance(value, str):
        items = re.split(r"[;,]", value)
    else:
        items = list(value)
    cleaned: list[str] = []
    for item in items:
        trimmed = item.strip()
        if not trimmed:
            continue
        cleaned.append(trimmed.lower() if coerce_lower else trimmed)
    return cleaned


class Settings(BaseSettings):
    """App configuration derived from environment variables."""

    input_dir: Path | None = Field(None, alias="INPUT_DIR")
    output_dir: Path = Field(Path("extracted_pdfs"), alias="OUTPUT_DIR")
    eml_extensions_raw: str = Field(".eml", alias="EML_EXTENSIONS")
    extract_workers: int = Field(1, ge=1, alias="EXTRACT_WORKERS")
    nested_multipart: bool = Field(False, alias="NESTED_MULTIPART")
    ledger_db: Path | None = Field(None, alias="LEDGER_DB")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("input_dir", "ledger_db", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value

    @property
    def eml_extensions(self) -> tuple[str, ...]:
        """Dotted, lower-cased extensions that mark a file as an EML message."""
        extensions = [
            ext if ext.startswith(".") else f".{ext}"
            for ext in _split_list(self.eml_extensions_raw, coerce_lower=True)
        ]
        return tuple(extensions) or (".eml",)
