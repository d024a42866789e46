"""Application configuration management for the study notebook core."""


import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

ENV_FILE: Final[str] = ".env"
DEFAULT_OCR_LANG: Final[str] = "kor+eng"
DEFAULT_PAGE_SEG_MODE: Final[int] = 3
DEFAULT_TASK_TABLE: Final[str] = "todos"
DEFAULT_LOG_LEVEL: Final[int] = logging.INFO


@dataclass(frozen=True)
class OcrSettings:
	"""Recognizer defaults and backend credentials."""
	lang: str = DEFAULT_OCR_LANG
	page_seg_mode: int = DEFAULT_PAGE_SEG_MODE
	tesseract_cmd: str | None = None
	google_vision_api_key: str | None = None


@dataclass(frozen=True)
class SupabaseCredentials:
	"""Container for Supabase project access."""
	url: str
	key: str


@dataclass(frozen=True)
class AppConfig:
	"""Aggregate configuration for the CLI runtime."""
	ocr: OcrSettings
	supabase: SupabaseCredentials | None
	output_dir: Path
	task_table: str = DEFAULT_TASK_TABLE
	log_level: int = DEFAULT_LOG_LEVEL


def load_config(env_file: str | Path = ENV_FILE) -> AppConfig:
	"""Load environment-based configuration values.

	Returns:
		AppConfig: Parsed configuration with credentials when available.
	"""
	load_dotenv(env_file)
	output_dir = Path(os.getenv("OCR_OUTPUT_DIR", "outputs")).resolve()

	return AppConfig(
		ocr=_load_ocr_settings(),
		supabase=_load_supabase_credentials(),
		output_dir=output_dir,
		task_table=os.getenv("STUDY_TASK_TABLE", DEFAULT_TASK_TABLE),
		log_level=_parse_log_level(os.getenv("STUDY_LOG_LEVEL")),
	)


def configure_logging(level: int = DEFAULT_LOG_LEVEL) -> None:
	"""Configure the root logger for the application."""
	logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _load_ocr_settings() -> OcrSettings:
	"""Load OCR language, segmentation mode and backend credentials."""
	psm = os.getenv("STUDY_OCR_PSM")
	return OcrSettings(
		lang=os.getenv("STUDY_OCR_LANG", DEFAULT_OCR_LANG),
		page_seg_mode=int(psm) if psm else DEFAULT_PAGE_SEG_MODE,
		tesseract_cmd=os.getenv("TESSERACT_CMD") or None,
		google_vision_api_key=os.getenv("GOOGLE_VISION_API_KEY") or None,
	)


def _load_supabase_credentials() -> SupabaseCredentials | None:
	"""Load Supabase credentials from the environment if available."""
	url = os.getenv("SUPABASE_URL")
	key = os.getenv("SUPABASE_KEY")
	if url and key:
		return SupabaseCredentials(url=url, key=key)
	return None


def _parse_log_level(value: str | None) -> int:
	if not value:
		return DEFAULT_LOG_LEVEL
	level = logging.getLevelName(value.upper())
	return level if isinstance(level, int) else DEFAULT_LOG_LEVEL
