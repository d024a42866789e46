"""Pydantic schemas for raw and normalized OCR output and review tasks."""


from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

class RawBBox(BaseModel):
	"""Opposite-corner bounding box as reported by an OCR engine."""
	x0: int
	y0: int
	x1: int
	y1: int

class RawBlock(BaseModel):
	"""One engine-specific text block before normalization."""
	text: str | None = None
	bbox: RawBBox
	confidence: float | None = None

class RawRecognitionResult(BaseModel):
	"""Full-page text plus ordered raw blocks returned by a recognizer."""
	text: str | None = None
	blocks: list[RawBlock] | None = None

class BoundingBox(BaseModel):
	"""Top-left origin box with width and height."""
	model_config = ConfigDict(frozen=True)

	x: int
	y: int
	w: int
	h: int

class TextBlock(BaseModel):
	"""Represents a single recognized text fragment."""
	model_config = ConfigDict(frozen=True)

	text: str
	bbox: BoundingBox
	confidence: float | None = None
	page: int = 0

class OcrResult(BaseModel):
	"""Normalized OCR output handed to the caller."""
	model_config = ConfigDict(frozen=True)

	text: str = ""
	blocks: list[TextBlock] = Field(default_factory=list)
	pages: int = 1

class ReviewTask(BaseModel):
	"""Review task row as stored in the task table."""
	model_config = ConfigDict(populate_by_name=True)

	id: str | int | None = None
	title: str
	description: str
	due_date: datetime
	owner_id: str = Field(alias="user_id", min_length=1)
	is_review_task: bool = True
	archive_name: str = Field(min_length=1)
	is_completed: bool = False

	def to_record(self) -> dict:
		"""Serialize using the store's column names, leaving the id to the store."""
		return self.model_dump(mode="json", by_alias=True, exclude={"id"})

class SrsResult(BaseModel):
	"""Outcome of one spaced-repetition interval computation."""
	ease_factor: float
	interval_days: int
	next_review_date: datetime
