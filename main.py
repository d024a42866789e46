"""Command-line interface for page extraction and review scheduling."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from config import AppConfig, configure_logging, load_config
from extractor import Extractor, Recognizer
from normalizer import PostprocessOptions
from providers.google_vision_ocr import GoogleVisionRecognizer
from providers.supabase_store import SupabaseRecordStore
from providers.tesseract_ocr import TesseractRecognizer
from scheduler import ReviewScheduler, ScheduleResult
from srs import calculate_srs, confidence_to_quality
from utils.image_io import PDF_RENDER_DPI, PreprocessOptions, ensure_image_path, is_url
from utils.io_json import dump_ocr_result


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
	"""Parse command-line arguments."""
	parser = argparse.ArgumentParser(description="Study notebook OCR and review scheduling CLI")
	commands = parser.add_subparsers(dest="command", required=True)

	ocr = commands.add_parser("ocr", help="Extract text and blocks from a page image")
	ocr.add_argument("--image", required=True, help="Path or http(s) URL of a page image or PDF")
	ocr.add_argument("--backend", choices=["tesseract", "google"], default="tesseract", help="OCR backend to use")
	ocr.add_argument("--lang", default=None, help="Tesseract language string, e.g. kor+eng")
	ocr.add_argument("--psm", type=int, default=None, help="Tesseract page segmentation mode")
	ocr.add_argument("--preprocess", choices=["none", "binary", "grayscale"], default="none", help="Image cleanup before OCR")
	ocr.add_argument("--sharpen", action="store_true", help="Sharpen the binarized image")
	ocr.add_argument("--dpi", type=int, default=PDF_RENDER_DPI, help="Render resolution for PDF pages")
	ocr.add_argument("--rotation", type=float, default=0.0, help="Rotate the image clockwise by this many degrees")
	ocr.add_argument("--strip-answers", action="store_true", help="Remove answer annotations from the text")
	ocr.add_argument("--table-mode", action="store_true", help="Turn wide space runs into tabs")
	ocr.add_argument("--math-mode", action="store_true", help="Apply formula-oriented fixes")
	ocr.add_argument("--outdir", default=None, help="Directory to store JSON outputs")

	review = commands.add_parser("review", help="Manage review tasks")
	actions = review.add_subparsers(dest="action", required=True)

	create = actions.add_parser("create", help="Schedule a review of an archive")
	create.add_argument("--owner", required=True, help="Owner user id")
	create.add_argument("--archive", required=True, help="Archive name")
	create.add_argument("--due", type=datetime.fromisoformat, default=None, help="ISO due date (default: tomorrow)")

	status = actions.add_parser("status", help="Set the completion flag of a review task")
	status.add_argument("--task-id", required=True, help="Review task id")
	flag = status.add_mutually_exclusive_group(required=True)
	flag.add_argument("--completed", dest="completed", action="store_true", help="Mark as completed")
	flag.add_argument("--pending", dest="completed", action="store_false", help="Mark as pending")

	grade = actions.add_parser("grade", help="Schedule the next review from a self-rated confidence")
	grade.add_argument("--owner", required=True, help="Owner user id")
	grade.add_argument("--archive", required=True, help="Archive name")
	grade.add_argument("--ease", type=float, default=2.5, help="Current ease factor")
	grade.add_argument("--interval", type=int, default=1, help="Current interval in days")
	grade.add_argument("--confidence", type=int, required=True, help="Confidence from 1 to 5")
	return parser.parse_args(argv)


def build_extractor(args: argparse.Namespace, config: AppConfig) -> Extractor:
	"""Wire the chosen backend and cleanup options into an Extractor."""
	settings = config.ocr

	def factory() -> Recognizer:
		if args.backend == "google":
			if not settings.google_vision_api_key:
				raise RuntimeError("Google Vision API key is not configured.")
			return GoogleVisionRecognizer(api_key=settings.google_vision_api_key)
		return TesseractRecognizer(tesseract_cmd=settings.tesseract_cmd)

	preprocess = None
	if args.preprocess != "none":
		preprocess = PreprocessOptions(mode=args.preprocess, sharpen=args.sharpen, rotation=args.rotation)
	postprocess = None
	if args.strip_answers or args.table_mode or args.math_mode:
		postprocess = PostprocessOptions(
			strip_answers=args.strip_answers,
			table_mode=args.table_mode,
			math_mode=args.math_mode,
		)
	return Extractor(
		recognizer_factory=factory,
		lang=args.lang or settings.lang,
		page_seg_mode=args.psm if args.psm is not None else settings.page_seg_mode,
		preprocess=preprocess,
		postprocess=postprocess,
		pdf_dpi=args.dpi,
	)


async def run_ocr(args: argparse.Namespace, config: AppConfig) -> dict[str, Any]:
	"""Execute OCR processing for the provided arguments."""
	image = args.image if is_url(args.image) else ensure_image_path(args.image)
	output_dir = Path(args.outdir).expanduser().resolve() if args.outdir else config.output_dir
	extractor = build_extractor(args, config)
	result = await extractor.extract(image)

	output_path, json_payload = dump_ocr_result(result, output_dir, args.backend, str(image))
	logging.info("Saved OCR output to %s", output_path)
	print(json.dumps(json_payload, ensure_ascii=False, indent=2))
	return json_payload


async def run_review(args: argparse.Namespace, config: AppConfig) -> ScheduleResult:
	"""Execute one review-task operation against Supabase."""
	if not config.supabase:
		raise RuntimeError("Supabase credentials are not configured.")
	store = await SupabaseRecordStore.connect(config.supabase)
	scheduler = ReviewScheduler(store=store, table=config.task_table)

	if args.action == "create":
		return await scheduler.create_review_task(args.owner, args.archive, args.due)
	if args.action == "status":
		return await scheduler.update_review_task_status(args.task_id, args.completed)

	srs = calculate_srs(args.ease, args.interval, confidence_to_quality(args.confidence))
	logging.info("Next review in %s days (ease %.2f)", srs.interval_days, srs.ease_factor)
	return await scheduler.create_review_task(args.owner, args.archive, srs.next_review_date)


def main(argv: list[str] | None = None) -> int:
	"""Entry point for the CLI application."""
	config = load_config()
	configure_logging(config.log_level)
	try:
		args = parse_arguments(argv)
		if args.command == "ocr":
			asyncio.run(run_ocr(args, config))
			return 0
		result = asyncio.run(run_review(args, config))
	except Exception as exc:  # noqa: BLE001
		logging.exception("Command failed: %s", exc)
		return 1
	if not result.success:
		return 1
	print(json.dumps({"success": True, "record": result.record}, ensure_ascii=False, indent=2, default=str))
	return 0


if __name__ == "__main__":
	raise SystemExit(main())
