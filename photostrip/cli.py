"""
Command line entry points for composing prints and listing templates.
"""
import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Sequence

from PySide6.QtGui import QGuiApplication

from utils.image_operations import FILTER_NAMES
from utils.layout_templates import LayoutTemplates
from utils.validation import validate_image_path, validate_layout_path, validate_output_path

from . import config
from .composition import make_photos
from .compositor import PrintCompositor
from .errors import PhotostripError
from .layout_validation import validate_layout, validate_print_layout
from .managers.memory import MemoryGuard
from .print_formats import Orientation, PaperFormat
from .serialization import LayoutDocument

OUTPUT_EXTENSIONS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".webp": "WEBP",
}
PHOTO_EXTENSIONS = {f".{ext}" for ext in config.SUPPORTED_IMAGE_FORMATS}


def configure_logging(log_dir: Optional[str] = None) -> logging.Logger:
    """Configure and return the application logger.

    Handler setup is idempotent. Records go to a rotating file under
    ``log_dir`` and are mirrored to stdout.
    """

    logger = logging.getLogger(config.LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(config.LOG_LEVEL)

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    log_path = Path(log_dir or config.LOG_DIR) / config.LOG_FILE
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photostrip",
        description="Compose print-ready photo strips and 4R prints.",
    )
    parser.add_argument("--log-dir", dest="log_dir", default=None, help="Directory for the rotating log file.")
    commands = parser.add_subparsers(dest="command", required=True)

    compose = commands.add_parser("compose", help="Render a layout with photos to an image file.")
    source_group = compose.add_mutually_exclusive_group(required=True)
    source_group.add_argument("--layout", dest="layout_path", help="Layout document (.json).")
    source_group.add_argument("--template", dest="template_id", help="Built-in or imported template id.")
    compose.add_argument(
        "--photo", dest="photos", action="append", default=[],
        help="Photo file; repeat in capture order.",
    )
    compose.add_argument("-o", "--output", dest="output_path", required=True, help="Output image (.jpg, .png, .webp).")

    print_group = compose.add_argument_group("Print")
    print_group.add_argument("--format", dest="paper_format", choices=[f.value for f in PaperFormat], default=None, help="Paper format.")
    print_group.add_argument("--orientation", choices=[o.value for o in Orientation], default=None, help="4R orientation.")
    print_group.add_argument("--dpi", type=int, default=None, help="Print resolution.")
    print_group.add_argument("--quality", type=float, default=None, help="Encoder quality between 0 and 1.")
    print_group.add_argument("--cut-marks", dest="cut_marks", action="store_true", default=None, help="Draw the strip cut line.")
    print_group.add_argument("--no-cut-marks", dest="cut_marks", action="store_false", help="Omit the strip cut line.")
    print_group.add_argument("--placeholders", dest="placeholders", action="store_true", help="Tint boxes without a photo.")
    print_group.add_argument("--no-placeholders", dest="placeholders", action="store_false", help="Leave boxes without a photo empty.")
    print_group.add_argument("--preview-height", dest="preview_height", type=int, default=None, help="Write a scaled preview instead of the full print.")

    asset_group = compose.add_argument_group("Assets")
    asset_group.add_argument("--filter", dest="photo_filter", choices=FILTER_NAMES, default=None, help="Photo filter.")
    asset_group.add_argument("--background-image", dest="background_image", default=None, help="Background image file.")
    asset_group.add_argument("--frame", dest="frame_image", default=None, help="Frame overlay image file.")
    compose.set_defaults(placeholders=True)

    templates = commands.add_parser("templates", help="List layout templates.")
    templates.add_argument("--format", dest="paper_format", choices=[f.value for f in PaperFormat], default=None, help="Only list templates for this paper format.")
    templates.add_argument("--json", dest="as_json", action="store_true", help="Print templates as JSON.")
    return parser


def load_document(args: argparse.Namespace) -> LayoutDocument:
    """Resolve the layout source and apply command line overrides."""

    if args.layout_path:
        path = validate_layout_path(args.layout_path)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Layout file is not valid JSON: {e}") from e
        document = LayoutDocument.from_payload(payload)
    else:
        template = LayoutTemplates.get_template(args.template_id)
        document = LayoutDocument(
            boxes=template.boxes,
            paper_format=template.paper_format,
            background_color=template.background_color,
        )

    overrides = {}
    if args.paper_format is not None:
        overrides["paper_format"] = PaperFormat.parse(args.paper_format)
    if args.orientation is not None:
        overrides["orientation"] = Orientation.parse(args.orientation)
    if args.dpi is not None:
        overrides["dpi"] = args.dpi
    if args.quality is not None:
        overrides["quality"] = args.quality
    if args.cut_marks is not None:
        overrides["show_cut_marks"] = args.cut_marks
    if args.photo_filter is not None:
        overrides["photo_filter"] = args.photo_filter
    return dataclasses.replace(document, **overrides) if overrides else document


def report_layout(document: LayoutDocument, logger: logging.Logger) -> None:
    """Log validator findings; they never block composition."""

    for message in validate_layout(document.boxes).messages():
        logger.warning("Layout: %s", message)
    for message in validate_print_layout(document.boxes):
        logger.warning("Print layout: %s", message)


def _ensure_gui_application() -> QGuiApplication:
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QGuiApplication.instance()
    if app is None:
        app = QGuiApplication(sys.argv[:1])
    return app


def run_compose(args: argparse.Namespace, logger: logging.Logger) -> int:
    output_path = validate_output_path(args.output_path, OUTPUT_EXTENSIONS)
    image_format = OUTPUT_EXTENSIONS[output_path.suffix.lower()]
    photo_paths = [validate_image_path(path, PHOTO_EXTENSIONS) for path in args.photos]
    background = validate_image_path(args.background_image, PHOTO_EXTENSIONS) if args.background_image else None
    frame = validate_image_path(args.frame_image, PHOTO_EXTENSIONS) if args.frame_image else None

    document = load_document(args)
    report_layout(document, logger)
    request = document.to_request(
        make_photos([str(path) for path in photo_paths]),
        show_placeholders=args.placeholders,
        image_format=image_format,
        background_image=str(background) if background else None,
        frame_image=str(frame) if frame else None,
    )

    _ensure_gui_application()
    compositor = PrintCompositor(memory_guard=MemoryGuard(config.MEMORY_THRESHOLD_BYTES))
    if args.preview_height is not None:
        output = asyncio.run(compositor.compose_preview(request, args.preview_height))
    else:
        output = asyncio.run(compositor.compose(request))

    output_path.write_bytes(output.data)
    width_in, height_in = output.physical_size_inches
    logger.info(
        "Wrote %s (%dx%d px, %.2fx%.2f in at %d dpi)",
        output_path, output.width, output.height, width_in, height_in, output.dpi,
    )
    return 0


def run_templates(args: argparse.Namespace) -> int:
    if args.paper_format:
        templates = LayoutTemplates.templates_for(PaperFormat.parse(args.paper_format))
    else:
        templates = [LayoutTemplates.get_template(tid) for tid in LayoutTemplates.template_ids()]

    if args.as_json:
        print(json.dumps([template.to_dict() for template in templates], indent=2))
        return 0
    for template in templates:
        print(f"{template.id}\t{template.paper_format.value}\t{template.photo_count}\t{template.name}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = configure_logging(args.log_dir)
    try:
        if args.command == "compose":
            return run_compose(args, logger)
        return run_templates(args)
    except (ValueError, PhotostripError) as e:
        logger.error("%s failed: %s", args.command, e)
        return 1


__all__: List[str] = [
    "build_parser",
    "configure_logging",
    "load_document",
    "main",
]
