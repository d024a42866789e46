"""JSON persistence of extraction results."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from schemas import OcrResult

DATE_PATTERN = "%Y%m%d_%H%M%S"

def build_output_path(output_dir: Path, backend: str, pages: int) -> Path:
	"""Name the output after the backend, page count and UTC time of the run."""
	timestamp = datetime.now(timezone.utc).strftime(DATE_PATTERN)
	return output_dir.joinpath(f"{backend}_{pages}p_{timestamp}.json")

def ocr_payload(result: OcrResult, backend: str, source: str) -> dict[str, Any]:
	"""Wrap a normalized result with the run metadata saved alongside it."""
	return {
		"backend": backend,
		"source": source,
		"pages": result.pages,
		"extracted_at": datetime.now(timezone.utc).isoformat(),
		**result.model_dump(exclude={"pages"}),
	}

def dump_ocr_result(result: OcrResult, output_dir: Path, backend: str, source: str) -> tuple[Path, dict[str, Any]]:
	"""Persist one extraction run as formatted JSON and return its path and payload."""
	output_dir.mkdir(parents=True, exist_ok=True)
	payload = ocr_payload(result, backend, source)
	path = build_output_path(output_dir, backend, result.pages)
	path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
	return path, payload
