"""Tesseract OCR provider implementation."""


import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from schemas import RawBBox, RawBlock, RawRecognitionResult
from utils.image_io import ImageSource, load_image

BLOCK_LEVEL = 2
WORD_LEVEL = 5


@dataclass
class TesseractRecognizer:
	"""Recognizer backed by a local Tesseract install through pytesseract."""

	tesseract_cmd: str | None = None
	engine: Any | None = field(default=None, repr=False)

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)

	async def recognize(self, image: ImageSource, lang: str, page_seg_mode: int) -> RawRecognitionResult:
		return await asyncio.to_thread(self._recognize_sync, image, lang, page_seg_mode)

	def _recognize_sync(self, image: ImageSource, lang: str, page_seg_mode: int) -> RawRecognitionResult:
		engine = self._engine()
		picture = load_image(image)
		config = f"--psm {page_seg_mode}"
		text = engine.image_to_string(picture, lang=lang, config=config)
		data = engine.image_to_data(picture, lang=lang, config=config, output_type=engine.Output.DICT)
		blocks = self._parse_blocks(data)
		self._logger.debug("Tesseract returned %s blocks", len(blocks))
		return RawRecognitionResult(text=text, blocks=blocks)

	def _engine(self) -> Any:
		if self.engine is None:
			import pytesseract

			if self.tesseract_cmd:
				pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
			self.engine = pytesseract
		return self.engine

	def _parse_blocks(self, data: dict[str, list[Any]]) -> list[RawBlock]:
		blocks: dict[tuple[int, int], dict[str, Any]] = {}
		for row in self._rows(data):
			key = (int(row["page_num"]), int(row["block_num"]))
			level = int(row["level"])
			if level == BLOCK_LEVEL:
				left, top = int(row["left"]), int(row["top"])
				blocks[key] = {
					"bbox": RawBBox(x0=left, y0=top, x1=left + int(row["width"]), y1=top + int(row["height"])),
					"lines": {},
					"confidences": [],
				}
			elif level == WORD_LEVEL and key in blocks:
				word = str(row.get("text") or "").strip()
				if not word:
					continue
				line_key = (int(row["par_num"]), int(row["line_num"]))
				blocks[key]["lines"].setdefault(line_key, []).append(word)
				confidence = float(row["conf"])
				if confidence >= 0:
					blocks[key]["confidences"].append(confidence)

		parsed: list[RawBlock] = []
		for entry in blocks.values():
			text = "\n".join(" ".join(words) for words in entry["lines"].values())
			confidences = entry["confidences"]
			confidence = sum(confidences) / len(confidences) if confidences else None
			parsed.append(RawBlock(text=text, bbox=entry["bbox"], confidence=confidence))
		return parsed

	def _rows(self, data: dict[str, list[Any]]) -> list[dict[str, Any]]:
		columns = list(data.keys())
		count = len(data.get("level", []))
		return [{column: data[column][index] for column in columns} for index in range(count)]
