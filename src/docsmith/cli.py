"""
Docsmith - Command Line Interface
One subcommand per document tool
"""

from pathlib import Path
from typing import Iterable, List, Optional
import argparse
import json
import logging
import sys

from layout_engine.annotations import EditTool
from layout_engine.config import CONFIG
from layout_engine.errors import DocumentToolError, InvalidInputError
from layout_engine.geometry import Point
from layout_engine.stamps import POSITIONS, PageNumberOptions, WatermarkOptions
from layout_engine.styles import DEFAULT_FONT, FONT_CODES
from utils.file_utils import load_source_file, write_output

from . import __version__
from . import tools

logger = logging.getLogger(__name__)


def _edit_page_index(edit: dict, page_count: int) -> int:
    # Edit files number pages from 1 like the page range syntax
    if not isinstance(edit, dict):
        raise InvalidInputError(f"Edit record is not an object: {edit!r}",
                                user_message="Each edit must be a JSON object.")
    page = edit.get("page", 1)
    if not isinstance(page, int) or not 1 <= page <= page_count:
        raise InvalidInputError(f"Edit page {page!r} outside 1..{page_count}",
                                user_message=f"Edit page must be between 1 and {page_count}.")
    return page - 1


def _edit_points(edit: dict) -> List[Point]:
    points = []
    for entry in edit.get("points") or []:
        if (not isinstance(entry, (list, tuple)) or len(entry) != 2
                or not all(isinstance(value, (int, float)) for value in entry)):
            raise InvalidInputError(f"Bad stroke point: {entry!r}",
                                    user_message="Drawing points must be [x, y] number pairs.")
        points.append(Point(entry[0], entry[1]))
    return points


def _load_edits(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            edit_file = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidInputError(str(e), user_message=f"Could not read edits file: {path}") from e
    if isinstance(edit_file, list):
        edit_file = {"edits": edit_file}
    if not isinstance(edit_file, dict) or not isinstance(edit_file.get("edits"), list):
        raise InvalidInputError("Edits file has no 'edits' list",
                                user_message="Edits file must contain a list of edits.")
    return edit_file


def replay_edits(session: tools.EditingSession, edits: Iterable[dict], base_dir: Path) -> int:
    """
    Apply edit records to a session as a user would make them

    Strokes go through the pointer events so they follow the same path
    as interactive drawing. Each referenced page is rendered first, which
    records the frame its viewer coordinates refer to.

    Returns:
        Number of edits added
    """
    model = session.model
    rendered = set()
    added = 0

    for edit in edits:
        page_index = _edit_page_index(edit, session.document.page_count)
        if page_index not in rendered:
            session.render_page(page_index)
            rendered.add(page_index)

        kind = edit.get("type")
        if kind == "text":
            model.set_tool(EditTool.TEXT)
            result = model.add_text(
                page_index, Point(edit.get("x", 0), edit.get("y", 0)), edit.get("text", ""),
                font_family=edit.get("font", "Helvetica"),
                size=edit.get("size", 16),
                color=edit.get("color", "#000000"),
            )
            if result is not None:
                added += 1
        elif kind == "image":
            if not isinstance(edit.get("path"), str) or not edit["path"]:
                raise InvalidInputError("Image edit has no path",
                                        user_message='Image edits need a "path" to a PNG or JPEG file.')
            model.set_tool(EditTool.IMAGE)
            image = load_source_file(str(base_dir / edit["path"]))
            session.add_image_file(page_index, Point(edit.get("x", 0), edit.get("y", 0)), image,
                                   width=edit.get("width"), height=edit.get("height"))
            added += 1
        elif kind == "draw":
            points = _edit_points(edit)
            if not points:
                continue
            model.set_tool(EditTool.DRAW)
            model.stroke_color = edit.get("color", "#000000")
            model.stroke_width = edit.get("width", 2.0)
            model.pointer_down(page_index, points[0])
            for point in points[1:]:
                model.pointer_move(point)
            model.pointer_up()
            added += 1
        else:
            raise InvalidInputError(f"Unknown edit type: {kind!r}",
                                    user_message="Edit type must be text, image or draw.")

    model.set_tool(EditTool.SELECT)
    return added


def _run_extract(args) -> Path:
    output = tools.extract_pages(load_source_file(args.input), args.pages, password=args.password)
    return write_output(output, args.output)


def _run_number(args) -> Path:
    options = PageNumberOptions(position=args.position, margin=args.margin,
                                template=args.template, font=args.font,
                                size=args.size, color=args.color)
    output = tools.add_page_numbers(load_source_file(args.input), options, args.pages,
                                    password=args.password)
    return write_output(output, args.output)


def _run_watermark(args) -> Path:
    options = WatermarkOptions(text=args.text, size=args.size, color=args.color,
                               opacity=args.opacity, rotation=args.rotation,
                               position=args.position, tiled=args.tiled)
    image = load_source_file(args.image) if args.image else None
    output = tools.add_watermark(load_source_file(args.input), options, args.pages,
                                 image=image, password=args.password)
    return write_output(output, args.output)


def _run_edit(args) -> Path:
    edits_path = Path(args.edits)
    edit_file = _load_edits(edits_path)
    session = tools.EditingSession(load_source_file(args.input), scale=edit_file.get("scale"),
                                   password=args.password)
    added = replay_edits(session, edit_file["edits"], edits_path.parent)
    print(f"Applying {added} edits")
    return write_output(session.save(), args.output)


def _run_word_to_pdf(args) -> Path:
    output = tools.word_to_pdf(load_source_file(args.input))
    return write_output(output, args.output)


def _run_pdf_to_word(args) -> Path:
    output = tools.pdf_to_word(load_source_file(args.input), args.format, password=args.password)
    return write_output(output, args.output)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docsmith", description="Docsmith document tools")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_command(name, handler, help_text, pdf_input=True):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("input", help="Input file")
        sub.add_argument("--output", "-o", help="Output file or directory")
        if pdf_input:
            sub.add_argument("--password", help="Password for an encrypted PDF")
        sub.set_defaults(handler=handler)
        return sub

    extract = add_command("extract", _run_extract, "Extract pages into a new PDF")
    extract.add_argument("--pages", "-p", required=True, help='Pages to keep, e.g. "1,3-5" or "all"')

    number = add_command("number", _run_number, "Add page numbers")
    number.add_argument("--pages", "-p", default="all", help="Pages to number")
    number.add_argument("--position", default="bottom-center", choices=POSITIONS)
    number.add_argument("--template", default="{page} / {total}",
                        help="Label template with {page} and {total} placeholders")
    number.add_argument("--margin", type=float, default=CONFIG.page_number_margin,
                        help="Distance from the page edge in points")
    number.add_argument("--font", default=DEFAULT_FONT, choices=list(FONT_CODES))
    number.add_argument("--size", type=float, default=12.0, help="Font size in points")
    number.add_argument("--color", default="#000000", help="Hex colour")

    watermark = add_command("watermark", _run_watermark, "Stamp a text or image watermark")
    watermark.add_argument("--pages", "-p", default="all", help="Pages to watermark")
    watermark.add_argument("--text", default="CONFIDENTIAL", help="Watermark text")
    watermark.add_argument("--image", help="PNG or JPEG watermark instead of text")
    watermark.add_argument("--size", type=float, default=72.0, help="Font size in points")
    watermark.add_argument("--color", default="#ff0000", help="Hex colour")
    watermark.add_argument("--opacity", type=float, default=0.5)
    watermark.add_argument("--rotation", type=float, default=-45.0, help="Degrees, clockwise negative")
    watermark.add_argument("--position", default="middle-center", choices=POSITIONS)
    watermark.add_argument("--tiled", action="store_true", help="Repeat across the whole page")

    edit = add_command("edit", _run_edit, "Apply text, image and drawing edits from a JSON file")
    edit.add_argument("--edits", "-e", required=True, help="JSON file of edits in viewer pixels")

    add_command("word-to-pdf", _run_word_to_pdf, "Convert .docx, HTML or text to PDF", pdf_input=False)

    pdf_to_word = add_command("pdf-to-word", _run_pdf_to_word, "Convert PDF text to a Word document")
    pdf_to_word.add_argument("--format", "-f", default="doc", choices=sorted(tools.WORD_FORMATS))

    return parser


def main(argv: Optional[List[str]] = None):
    """Command line interface main function"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        path = args.handler(args)
    except DocumentToolError as e:
        logger.debug(f"{type(e).__name__}: {e}")
        print(f"Error: {e.user_message}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        logger.debug(f"I/O error: {e}")
        print(f"Error: Could not write output: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Saved: {path}")
    return 0


if __name__ == "__main__":
    main()
