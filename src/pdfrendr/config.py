from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from pdfrendr.models import ProcessingOptions


def _parse_chat_ids(raw_value: str | None) -> set[int]:
    if not raw_value:
        return set()

    output: set[int] = set()
    for chunk in raw_value.split(","):
        cleaned = chunk.strip()
        if not cleaned:
            continue
        try:
            output.add(int(cleaned))
        except ValueError as exc:
            raise ValueError(f"Invalid chat id in ALLOWED_CHAT_IDS: {cleaned!r}") from exc
    return output


def _read_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _read_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a float, got {value!r}") from exc


@dataclass(frozen=True)
class Settings:
    telegram_bot_token: str
    allowed_chat_ids: set[int]
    max_pdf_mb: int
    render_quality: float
    compression_level: int
    timeout_ms: int
    log_level: str

    @property
    def max_pdf_bytes(self) -> int:
        return self.max_pdf_mb * 1024 * 1024

    def processing_options(self) -> ProcessingOptions:
        return ProcessingOptions(
            render_quality=self.render_quality,
            compression_level=self.compression_level,
            timeout_ms=self.timeout_ms,
        )


def load_processing_options() -> ProcessingOptions:
    load_dotenv()
    return ProcessingOptions(
        render_quality=_read_float("RENDER_QUALITY", 2.0),
        compression_level=_read_int("COMPRESSION_LEVEL", 2),
        timeout_ms=_read_int("TIMEOUT_MS", 30000),
    )


def load_settings() -> Settings:
    load_dotenv()

    bot_token = os.getenv("TELEGRAM_BOT_TOKEN", "").strip()
    if not bot_token:
        raise ValueError("TELEGRAM_BOT_TOKEN is required.")

    options = load_processing_options()
    return Settings(
        telegram_bot_token=bot_token,
        allowed_chat_ids=_parse_chat_ids(os.getenv("ALLOWED_CHAT_IDS")),
        max_pdf_mb=_read_int("MAX_PDF_MB", 30),
        render_quality=options.render_quality,
        compression_level=options.compression_level,
        timeout_ms=options.timeout_ms or 30000,
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
