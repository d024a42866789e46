"""Google Cloud Vision OCR provider implementation."""


import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from schemas import RawBBox, RawBlock, RawRecognitionResult
from utils.image_io import ImageSource, is_url, read_image_base64

ANNOTATE_URL = "https://vision.googleapis.com/v1/images:annotate"
LANGUAGE_HINTS: dict[str, str] = {
	"kor": "ko",
	"eng": "en",
	"jpn": "ja",
	"chi_sim": "zh",
	"chi_tra": "zh-Hant",
}

JsonDict = dict[str, Any]


class RecognitionError(RuntimeError):
	"""Raised when the Vision API rejects or fails a request."""


@dataclass
class GoogleVisionRecognizer:
	"""Recognizer wrapper around the Vision TEXT_DETECTION feature."""

	api_key: str
	client: httpx.AsyncClient | None = field(default=None, repr=False)
	timeout: float = 30.0
	max_results: int = 10

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)

	async def recognize(self, image: ImageSource, lang: str, page_seg_mode: int) -> RawRecognitionResult:
		# page segmentation is a Tesseract setting; Vision picks its own layout
		payload = await self._build_payload(image, lang)
		raw = await self._post(payload)
		response = self._first_response(raw)
		annotations = response.get("textAnnotations") or []
		text = annotations[0].get("description", "") if annotations else ""
		blocks = [self._to_block(item) for item in annotations[1:] if isinstance(item, dict)]
		self._logger.info("Vision OCR found %s text blocks", len(blocks))
		return RawRecognitionResult(text=text, blocks=blocks)

	async def _build_payload(self, image: ImageSource, lang: str) -> JsonDict:
		if is_url(image):
			image_field: JsonDict = {"source": {"imageUri": image}}
		else:
			image_field = {"content": await asyncio.to_thread(read_image_base64, image)}
		request: JsonDict = {
			"image": image_field,
			"features": [{"type": "TEXT_DETECTION", "maxResults": self.max_results}],
		}
		hints = language_hints(lang)
		if hints:
			request["imageContext"] = {"languageHints": hints}
		return {"requests": [request]}

	async def _post(self, payload: JsonDict) -> JsonDict:
		try:
			if self.client is not None:
				response = await self.client.post(ANNOTATE_URL, params={"key": self.api_key}, json=payload)
			else:
				async with httpx.AsyncClient(timeout=self.timeout) as client:
					response = await client.post(ANNOTATE_URL, params={"key": self.api_key}, json=payload)
		except httpx.HTTPError as exc:
			raise RecognitionError(f"Vision request failed: {exc}") from exc
		if response.status_code != 200:
			self._logger.error("Vision API error response (%s): %s", response.status_code, response.text)
			raise RecognitionError(f"Vision API error: {response.status_code} - {response.text}")
		return response.json()

	def _first_response(self, raw: JsonDict) -> JsonDict:
		responses = raw.get("responses") or [{}]
		first = responses[0] if isinstance(responses[0], dict) else {}
		error = first.get("error")
		if error:
			raise RecognitionError(error.get("message", "Vision API returned an error"))
		return first

	def _to_block(self, annotation: JsonDict) -> RawBlock:
		vertices = (annotation.get("boundingPoly") or {}).get("vertices") or []
		start = vertices[0] if len(vertices) > 0 else {}
		end = vertices[2] if len(vertices) > 2 else {}
		return RawBlock(
			text=annotation.get("description"),
			bbox=RawBBox(
				x0=start.get("x", 0),
				y0=start.get("y", 0),
				x1=end.get("x", 0),
				y1=end.get("y", 0),
			),
		)


def language_hints(lang: str) -> list[str]:
	"""Map a Tesseract language string such as 'kor+eng' to Vision hints."""
	hints: list[str] = []
	for code in lang.split("+"):
		hint = LANGUAGE_HINTS.get(code.strip())
		if hint and hint not in hints:
			hints.append(hint)
	return hints
