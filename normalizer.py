"""Normalization of raw recognizer output into cleaned text and text blocks."""
from __future__ import annotations

import re
from dataclasses import dataclass

from schemas import BoundingBox, OcrResult, RawBlock, RawRecognitionResult, TextBlock

HYPHEN_BREAK = re.compile(r"-\n")
TRAILING_SPACE = re.compile(r"[ \t]+\n")
PARAGRAPH_GAP = re.compile(r"\n{3,}")
NBSP = "\u00a0"

INLINE_ANSWER = re.compile(r"\(?\s*(?:정답|내\s*답)\s*[:：]?\s*[^)\n]*\)?", re.IGNORECASE)
ANSWER_LINE = re.compile(r"^\s*(?:정답은?|내\s*답)(?!\w)", re.IGNORECASE)
WIDE_GAP = re.compile(r"[ ]{3,}")
MULTI_SPACE = re.compile(r"[ \t]{2,}")
MATH_OPERATOR = re.compile(r"\s*([=+\-*/()])\s*")


@dataclass(frozen=True)
class PostprocessOptions:
	"""Optional study-text cleanup applied after normalization."""

	strip_answers: bool = False
	table_mode: bool = False
	math_mode: bool = False


def to_text_block(raw: RawBlock) -> TextBlock:
	"""Convert one raw block into a top-left/width/height text block."""
	box = raw.bbox
	confidence = raw.confidence / 100 if raw.confidence else None
	return TextBlock(
		text=(raw.text or "").strip(),
		bbox=BoundingBox(x=box.x0, y=box.y0, w=box.x1 - box.x0, h=box.y1 - box.y0),
		confidence=confidence,
	)


def _clean_once(text: str) -> str:
	text = HYPHEN_BREAK.sub("", text)
	text = text.replace(NBSP, " ")
	text = TRAILING_SPACE.sub("\n", text)
	return PARAGRAPH_GAP.sub("\n\n", text)


def normalize_text(text: str | None) -> str:
	"""Clean full-page OCR text.

	The pass is repeated until nothing changes, so normalized text is a fixed point.
	"""
	current = text or ""
	while True:
		cleaned = _clean_once(current)
		if cleaned == current:
			return cleaned
		current = cleaned


def normalize(raw: RawRecognitionResult) -> OcrResult:
	"""Turn a raw recognition result into an OcrResult. Never raises on absent fields."""
	blocks = [to_text_block(block) for block in raw.blocks or []]
	return OcrResult(text=normalize_text(raw.text), blocks=blocks)


def postprocess_text(text: str, options: PostprocessOptions) -> str:
	"""Apply the optional study cleanups and collapse leftover whitespace."""
	if options.strip_answers:
		text = INLINE_ANSWER.sub("", text)
		text = "\n".join(line for line in text.split("\n") if not ANSWER_LINE.match(line))
	if options.table_mode:
		text = WIDE_GAP.sub("\t", text)
	if options.math_mode:
		text = re.sub(r"\bO\b", "0", text)
		text = re.sub(r"\bl\b", "1", text)
		text = MATH_OPERATOR.sub(r" \1 ", text)
	text = MULTI_SPACE.sub(" ", text)
	text = PARAGRAPH_GAP.sub("\n\n", text)
	return text.strip()
