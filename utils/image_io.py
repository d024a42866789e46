"""Utility helpers for loading and preparing input images."""

import base64
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Union

import fitz
import httpx
import numpy as np
from PIL import Image

ImageSource = Union[str, Path, Image.Image]

GRAY_WEIGHTS = np.array([299, 587, 114], dtype=np.int64)
THRESHOLD_K = 0.2
PDF_RENDER_DPI = 180
MAX_PAGE_WIDTH = 2200

@dataclass(frozen=True)
class PreprocessOptions:
	"""Settings for the grayscale/threshold pass run before recognition."""
	mode: Literal["binary", "grayscale"] = "binary"
	tile_size: int = 32
	offset: float = 8.0
	sharpen: bool = False
	rotation: float = 0.0
	crop: tuple[int, int, int, int] | None = None

def is_url(source: ImageSource) -> bool:
	return isinstance(source, str) and source.startswith(("http://", "https://"))

def is_pdf(source: ImageSource) -> bool:
	if isinstance(source, Image.Image):
		return False
	return str(source).split("?", 1)[0].lower().endswith(".pdf")

def ensure_image_path(image: str | Path) -> Path:
	"""Validate that the provided path exists and points to a file."""
	path = Path(image).expanduser().resolve()
	if not path.exists():
		raise FileNotFoundError(f"Image path not found: {path}")
	if not path.is_file():
		raise ValueError(f"Image path is not a file: {path}")
	return path

def read_image_bytes(source: ImageSource) -> bytes:
	"""Return encoded image bytes for a path, URL or in-memory image."""
	if isinstance(source, Image.Image):
		buffer = io.BytesIO()
		source.save(buffer, format="PNG")
		return buffer.getvalue()
	if is_url(source):
		response = httpx.get(str(source), timeout=30, follow_redirects=True)
		response.raise_for_status()
		return response.content
	return ensure_image_path(source).read_bytes()

def read_image_base64(source: ImageSource) -> str:
	"""Read image bytes and encode them as base64 for HTTP payloads."""
	return base64.b64encode(read_image_bytes(source)).decode("utf-8")

def load_image(source: ImageSource) -> Image.Image:
	"""Open any supported image source as an RGB PIL image."""
	if isinstance(source, Image.Image):
		return source.convert("RGB")
	with Image.open(io.BytesIO(read_image_bytes(source))) as image:
		return image.convert("RGB")

def downscale_image(image: Image.Image, max_width: int = MAX_PAGE_WIDTH) -> Image.Image:
	"""Shrink pages wider than max_width, keeping the aspect ratio."""
	if image.width <= max_width:
		return image
	scale = max_width / image.width
	return image.resize((max_width, max(1, round(image.height * scale))), Image.Resampling.LANCZOS)

def render_pdf_pages(source: ImageSource, dpi: int = PDF_RENDER_DPI) -> list[Image.Image]:
	"""Render every page of a PDF to an RGB image, downscaled for OCR."""
	zoom = dpi / 72.0
	matrix = fitz.Matrix(zoom, zoom)
	pages: list[Image.Image] = []
	with fitz.open(stream=read_image_bytes(source), filetype="pdf") as doc:
		for page in doc:
			pixmap = page.get_pixmap(matrix=matrix, alpha=False)
			with Image.open(io.BytesIO(pixmap.tobytes("png"))) as image:
				pages.append(downscale_image(image.convert("RGB")))
	return pages

def preprocess_image(image: Image.Image, options: PreprocessOptions) -> Image.Image:
	"""Rotate, crop, gray and optionally binarize a page before OCR."""
	working = image.convert("RGB")
	if options.rotation % 360:
		working = working.rotate(-options.rotation, expand=True, fillcolor=(255, 255, 255))
	if options.crop:
		working = working.crop(_clamp_crop(options.crop, working.size))

	gray = (np.asarray(working, dtype=np.int64) @ GRAY_WEIGHTS) / 1000
	if options.mode == "grayscale":
		return Image.fromarray(np.rint(gray).astype(np.uint8))

	result = _adaptive_threshold(gray, max(8, options.tile_size), options.offset)
	if options.sharpen:
		result = _sharpen(result)
	return Image.fromarray(result)

def _clamp_crop(crop: tuple[int, int, int, int], size: tuple[int, int]) -> tuple[int, int, int, int]:
	x, y, w, h = crop
	width, height = size
	left = min(max(0, x), width)
	top = min(max(0, y), height)
	right = left + max(0, min(width - left, w))
	bottom = top + max(0, min(height - top, h))
	return left, top, right, bottom

def _adaptive_threshold(gray: np.ndarray, tile: int, offset: float) -> np.ndarray:
	height, width = gray.shape
	out = np.empty((height, width), dtype=np.uint8)
	for top in range(0, height, tile):
		for left in range(0, width, tile):
			block = gray[top:top + tile, left:left + tile]
			threshold = block.mean() - THRESHOLD_K * block.std() - offset
			out[top:top + tile, left:left + tile] = np.where(block < threshold, 0, 255)
	return out

def _sharpen(binary: np.ndarray) -> np.ndarray:
	padded = np.pad(binary.astype(np.int32), 1, mode="edge")
	center = padded[1:-1, 1:-1]
	edges = padded[:-2, 1:-1] + padded[2:, 1:-1] + padded[1:-1, :-2] + padded[1:-1, 2:]
	return np.clip(5 * center - edges, 0, 255).astype(np.uint8)
