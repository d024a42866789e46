"""Extraction pipeline: recognizer call followed by normalization."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

from PIL import Image

from normalizer import PostprocessOptions, normalize, normalize_text, postprocess_text
from schemas import OcrResult, RawRecognitionResult
from utils.image_io import (
	PDF_RENDER_DPI,
	ImageSource,
	PreprocessOptions,
	downscale_image,
	is_pdf,
	load_image,
	preprocess_image,
	render_pdf_pages,
)

DEFAULT_LANG = "kor+eng"
DEFAULT_PAGE_SEG_MODE = 3
PAGE_BREAK = "\n\n===== Page Break =====\n\n"


class Recognizer(Protocol):
	"""Anything that can turn an image into a raw recognition result."""

	async def recognize(self, image: ImageSource, lang: str, page_seg_mode: int) -> RawRecognitionResult:
		...


@dataclass
class Extractor:
	"""Runs a lazily created recognizer and normalizes its output.

	PDF sources are rendered page by page; each page is recognized and
	normalized on its own and the page texts are joined with PAGE_BREAK.
	"""

	recognizer_factory: Callable[[], Recognizer]
	lang: str = DEFAULT_LANG
	page_seg_mode: int = DEFAULT_PAGE_SEG_MODE
	preprocess: PreprocessOptions | None = None
	postprocess: PostprocessOptions | None = None
	pdf_dpi: int = PDF_RENDER_DPI
	_recognizer: Recognizer | None = field(default=None, init=False, repr=False)

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)

	@property
	def recognizer(self) -> Recognizer:
		if self._recognizer is None:
			self._logger.debug("Initializing OCR recognizer")
			self._recognizer = self.recognizer_factory()
		return self._recognizer

	async def extract(self, image: ImageSource, lang: str | None = None) -> OcrResult:
		"""Recognize an image or PDF and return cleaned text plus text blocks."""
		if is_pdf(image):
			pages = await asyncio.to_thread(render_pdf_pages, image, self.pdf_dpi)
			result = await self._extract_pages(pages, lang)
		else:
			if isinstance(image, Image.Image):
				image = downscale_image(image)
			result = await self._extract_page(image, lang)
		if self.postprocess is not None:
			result = result.model_copy(update={"text": postprocess_text(result.text, self.postprocess)})
		self._logger.info(
			"Extracted %s characters in %s blocks from %s page(s)",
			len(result.text),
			len(result.blocks),
			result.pages,
		)
		return result

	async def _extract_page(self, image: ImageSource, lang: str | None) -> OcrResult:
		if self.preprocess is not None:
			image = await asyncio.to_thread(self._prepare, image, self.preprocess)
		raw = await self.recognizer.recognize(image, lang or self.lang, self.page_seg_mode)
		return normalize(raw)

	async def _extract_pages(self, pages: list[Image.Image], lang: str | None) -> OcrResult:
		texts: list[str] = []
		blocks = []
		for index, page in enumerate(pages):
			result = await self._extract_page(page, lang)
			texts.append(result.text)
			blocks.extend(block.model_copy(update={"page": index}) for block in result.blocks)
		return OcrResult(text=normalize_text(PAGE_BREAK.join(texts)), blocks=blocks, pages=len(pages))

	def _prepare(self, image: ImageSource, options: PreprocessOptions) -> ImageSource:
		return preprocess_image(load_image(image), options)
