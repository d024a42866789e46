"""Tests for raw OCR result normalization."""
from __future__ import annotations

import pytest

from normalizer import PostprocessOptions, normalize, normalize_text, postprocess_text, to_text_block
from schemas import RawBBox, RawBlock, RawRecognitionResult


def _block(x0: int, y0: int, x1: int, y1: int, text: str | None = "word", confidence: float | None = None) -> RawBlock:
	return RawBlock(text=text, bbox=RawBBox(x0=x0, y0=y0, x1=x1, y1=y1), confidence=confidence)


@pytest.mark.parametrize(
	"corners",
	[(0, 0, 10, 20), (5, 7, 105, 47), (30, 40, 30, 40)],
)
def test_bbox_uses_corner_differences(corners: tuple[int, int, int, int]) -> None:
	"""Width and height come from the opposite corners, origin from the first."""
	x0, y0, x1, y1 = corners
	block = to_text_block(_block(x0, y0, x1, y1))
	assert (block.bbox.x, block.bbox.y) == (x0, y0)
	assert (block.bbox.w, block.bbox.h) == (x1 - x0, y1 - y0)


def test_zero_area_blocks_are_kept() -> None:
	"""Degenerate boxes pass through without filtering."""
	result = normalize(RawRecognitionResult(text="", blocks=[_block(3, 3, 3, 3, text="")]))
	assert len(result.blocks) == 1
	assert result.blocks[0].bbox.w == 0
	assert result.blocks[0].text == ""


@pytest.mark.parametrize("raw_confidence, expected", [(100, 1.0), (87, 0.87), (0.5, 0.005)])
def test_confidence_is_rescaled(raw_confidence: float, expected: float) -> None:
	"""Engine confidence in (0, 100] is divided by 100."""
	block = to_text_block(_block(0, 0, 1, 1, confidence=raw_confidence))
	assert block.confidence == pytest.approx(expected)


@pytest.mark.parametrize("raw_confidence", [0, None])
def test_missing_or_zero_confidence_stays_absent(raw_confidence: float | None) -> None:
	"""Zero and missing confidence both normalize to None, never 0.0."""
	block = to_text_block(_block(0, 0, 1, 1, confidence=raw_confidence))
	assert block.confidence is None


def test_block_text_is_trimmed_and_defaults_to_empty() -> None:
	"""Block text is stripped and a missing text becomes an empty string."""
	assert to_text_block(_block(0, 0, 1, 1, text="  hello \n")).text == "hello"
	assert to_text_block(_block(0, 0, 1, 1, text=None)).text == ""


def test_empty_raw_result() -> None:
	"""An all-empty raw result yields empty text and no blocks."""
	result = normalize(RawRecognitionResult())
	assert result.text == ""
	assert result.blocks == []


def test_block_order_is_preserved() -> None:
	"""Blocks come out in the order the engine produced them."""
	raw = RawRecognitionResult(blocks=[_block(0, 0, 1, 1, text="b"), _block(0, 0, 1, 1, text="a")])
	assert [block.text for block in normalize(raw).blocks] == ["b", "a"]


def test_hyphenated_line_break_is_joined() -> None:
	assert normalize_text("foo-\nbar") == "foobar"


def test_non_breaking_spaces_become_spaces() -> None:
	assert normalize_text("a\u00a0b") == "a b"


def test_trailing_whitespace_before_newline_is_removed() -> None:
	assert normalize_text("line one \t\nline two") == "line one\nline two"


def test_paragraph_gap_collapses_to_two_newlines() -> None:
	assert normalize_text("first\n\n\n\nsecond") == "first\n\nsecond"
	assert normalize_text("first\n\nsecond") == "first\n\nsecond"


def test_trailing_nbsp_before_newline_is_removed() -> None:
	"""NBSP replacement runs before trailing-whitespace stripping."""
	assert normalize_text("end\u00a0\nnext") == "end\nnext"


def test_absent_text_defaults_to_empty() -> None:
	assert normalize_text(None) == ""


@pytest.mark.parametrize(
	"text",
	[
		"foo-\nbar\n\n\n\nbaz  \nqux\u00a0",
		"word- \nsplit",
		"a--\n\nb",
		"\u00a0\n\n \n\n\nend",
		"plain text",
	],
)
def test_normalization_is_a_fixed_point(text: str) -> None:
	"""Normalizing already-normalized text changes nothing."""
	once = normalize(RawRecognitionResult(text=text)).text
	twice = normalize(RawRecognitionResult(text=once)).text
	assert once == twice


def test_strip_answers_removes_inline_and_line_answers() -> None:
	text = "1. 수도는? (정답: 서울)\n정답은 서울\n내 답: 부산\n2. 다음 문제"
	cleaned = postprocess_text(text, PostprocessOptions(strip_answers=True))
	assert "서울" not in cleaned
	assert "부산" not in cleaned
	assert "2. 다음 문제" in cleaned


def test_table_mode_turns_wide_gaps_into_tabs() -> None:
	cleaned = postprocess_text("name    score\nkim     90", PostprocessOptions(table_mode=True))
	assert cleaned == "name\tscore\nkim\t90"


def test_math_mode_fixes_digits_and_spaces_operators() -> None:
	cleaned = postprocess_text("x=l+O", PostprocessOptions(math_mode=True))
	assert cleaned == "x = 1 + 0"


def test_postprocess_without_options_only_tidies_whitespace() -> None:
	assert postprocess_text("  a  b\n\n\n\nc  ", PostprocessOptions()) == "a b\n\nc"
