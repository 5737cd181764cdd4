"""
Document tools - one function per user action

Each tool validates its input, runs the engine, and returns an OutputFile.
Collaborators (renderer, converter, encoder) can be injected; PyMuPDF and
python-docx backed defaults are used otherwise. Failures propagate as
DocumentToolError subclasses and nothing is returned on failure, so no
partial output exists.
"""

from dataclasses import replace
from typing import Optional
import logging

from layout_engine.annotations import AnnotationModel, ImageEdit, ImageKind
from layout_engine.config import CONFIG
from layout_engine.errors import InvalidInputError, PreconditionViolation, RenderFailure
from layout_engine.geometry import PageSize, Point
from layout_engine.interfaces import (
    DocumentEncoder, DocumentRenderer, MarkupConverter, MarkupRenderer, RenderedPage
)
from layout_engine.layout import reconstruct
from layout_engine.page_range import parse_page_range
from layout_engine.pagination import paginate
from layout_engine.stamps import (
    PageNumberOptions, WatermarkOptions, page_number_instructions, watermark_instructions
)
from pdf_processor.markup_converter import DocxConverter, plain_text_to_markup
from pdf_processor.markup_renderer import HtmlRenderer
from pdf_processor.pdf_annotator import PDFAnnotator
from pdf_processor.pdf_reader import PdfRenderer
from pdf_processor.word_export import to_docx, to_plain_text, to_word_html
from utils.file_utils import (
    DOCX_MIME, PDF_MIME, WORD_HTML_MIME, OutputFile, SourceFile,
    decode_text, output_name, validate_source
)

logger = logging.getLogger(__name__)

WORD_FORMATS = {
    "doc": (WORD_HTML_MIME, ".doc"),
    "docx": (DOCX_MIME, ".docx"),
    "txt": ("text/plain", ".txt"),
}


def extract_pages(source: SourceFile, range_text: str,
                  renderer: Optional[DocumentRenderer] = None,
                  encoder: Optional[DocumentEncoder] = None,
                  password: Optional[str] = None) -> OutputFile:
    """New PDF holding the selected pages in ascending order"""
    validate_source(source, "pdf")
    renderer = renderer or PdfRenderer(password)
    encoder = encoder or PDFAnnotator(password)

    document = renderer.describe(source.data)
    pages = parse_page_range(range_text, document.page_count)
    data = encoder.extract_pages(source.data, pages)
    logger.info(f"Extracted pages {list(pages)} from {source.name}")
    return OutputFile(data, PDF_MIME, output_name(source.name, "-extracted", ".pdf"))


def add_page_numbers(source: SourceFile, options: Optional[PageNumberOptions] = None,
                     range_text: str = "all",
                     renderer: Optional[DocumentRenderer] = None,
                     encoder: Optional[DocumentEncoder] = None,
                     password: Optional[str] = None) -> OutputFile:
    validate_source(source, "pdf")
    options = options or PageNumberOptions()
    renderer = renderer or PdfRenderer(password)
    encoder = encoder or PDFAnnotator(password)

    document = renderer.describe(source.data)
    pages = parse_page_range(range_text, document.page_count)
    instructions = page_number_instructions(document, pages, options, encoder)
    data = encoder.apply_instructions(source.data, instructions)
    logger.info(f"Numbered {len(pages)} pages of {source.name}")
    return OutputFile(data, PDF_MIME, output_name(source.name, "-numbered", ".pdf"))


def add_watermark(source: SourceFile, options: Optional[WatermarkOptions] = None,
                  range_text: str = "all", image: Optional[SourceFile] = None,
                  renderer: Optional[DocumentRenderer] = None,
                  encoder: Optional[DocumentEncoder] = None,
                  password: Optional[str] = None) -> OutputFile:
    """
    Stamp text or an image onto the selected pages

    Args:
        source: PDF to watermark
        options: Watermark appearance; text is used unless an image is given
        range_text: Page selection, "all" by default
        image: PNG or JPEG watermark; drawn at its pixel size in points
    """
    validate_source(source, "pdf")
    options = options or WatermarkOptions()
    renderer = renderer or PdfRenderer(password)
    encoder = encoder or PDFAnnotator(password)

    if image is not None:
        validate_source(image, "image")
        options = replace(
            options,
            image_data=image.data,
            image_kind=ImageKind.from_filename(image.name).value,
            image_size=encoder.image_size(image.data),
        )

    document = renderer.describe(source.data)
    pages = parse_page_range(range_text, document.page_count)
    instructions = watermark_instructions(document, pages, options, encoder)
    data = encoder.apply_instructions(source.data, instructions)
    logger.info(f"Watermarked {len(pages)} pages of {source.name}")
    return OutputFile(data, PDF_MIME, output_name(source.name, "-watermarked", ".pdf"))


def word_to_pdf(source: SourceFile,
                converter: Optional[MarkupConverter] = None,
                markup_renderer: Optional[MarkupRenderer] = None,
                encoder: Optional[DocumentEncoder] = None,
                page_size: Optional[PageSize] = None) -> OutputFile:
    """
    Convert a word-processing document to an image-based PDF

    The document is turned into markup, rendered as one tall raster, and
    sliced across fixed-size pages.
    """
    validate_source(source, "word")
    converter = converter or DocxConverter()
    markup_renderer = markup_renderer or HtmlRenderer()
    encoder = encoder or PDFAnnotator()
    page_size = page_size or PageSize(CONFIG.page_width, CONFIG.page_height)

    if source.suffix == ".docx" or source.mime_type == DOCX_MIME:
        markup = converter.to_markup(source.data)
    elif source.suffix in (".html", ".htm") or source.mime_type == "text/html":
        markup = decode_text(source.data)
    else:
        markup = plain_text_to_markup(decode_text(source.data))

    raster = markup_renderer.render_markup(markup, CONFIG.markup_render_width)
    try:
        placements = paginate(raster.frame.height, raster.frame.width,
                              page_size.width, page_size.height)
    except PreconditionViolation as e:
        raise RenderFailure(str(e)) from e

    data = encoder.build_from_raster(raster, placements, page_size)
    logger.info(f"Converted {source.name} into {len(placements)} pages")
    return OutputFile(data, PDF_MIME, output_name(source.name, "", ".pdf"))


def pdf_to_word(source: SourceFile, output_format: str = "doc",
                renderer: Optional[DocumentRenderer] = None,
                password: Optional[str] = None) -> OutputFile:
    """
    Rebuild paragraphs from a PDF's text and save them as a Word document

    Args:
        source: PDF to convert
        output_format: "doc" (Word HTML), "docx" or "txt"
    """
    validate_source(source, "pdf")
    if output_format not in WORD_FORMATS:
        raise InvalidInputError(f"Unknown output format: {output_format}",
                                user_message=f"Output format must be one of: {', '.join(WORD_FORMATS)}.")
    renderer = renderer or PdfRenderer(password)

    items = reconstruct(renderer.extract_glyph_runs(source.data))
    try:
        if output_format == "docx":
            data = to_docx(items)
        elif output_format == "txt":
            data = to_plain_text(items).encode("utf-8")
        else:
            data = to_word_html(items, title=source.stem).encode("utf-8")
    except (ValueError, UnicodeError) as e:
        logger.error(f"Error writing {output_format} for {source.name}: {e}")
        raise RenderFailure(str(e)) from e

    mime_type, extension = WORD_FORMATS[output_format]
    logger.info(f"Reconstructed {source.name} as {output_format}")
    return OutputFile(data, mime_type, output_name(source.name, "", extension))


class EditingSession:
    """
    One open document in the in-place editor

    Holds the selected file and its AnnotationModel. A failed save leaves
    both untouched so the user can fix the problem and save again.
    """

    def __init__(self, source: SourceFile,
                 renderer: Optional[DocumentRenderer] = None,
                 encoder: Optional[DocumentEncoder] = None,
                 scale: Optional[float] = None,
                 password: Optional[str] = None):
        validate_source(source, "pdf")
        self.source = source
        self.renderer = renderer or PdfRenderer(password)
        self.encoder = encoder or PDFAnnotator(password)
        self.scale = CONFIG.viewer_render_scale if scale is None else scale
        self.document = self.renderer.describe(source.data)
        self.model = AnnotationModel(self.document)

    def render_page(self, page_index: int) -> RenderedPage:
        """Rasterize a page for display and remember its frame"""
        page = self.renderer.render_page(self.source.data, page_index, self.scale)
        self.model.attach_frame(page_index, page.frame)
        return page

    def add_image_file(self, page_index: int, position: Point, image: SourceFile,
                       width: Optional[float] = None,
                       height: Optional[float] = None) -> ImageEdit:
        """Place a PNG/JPEG; the size defaults to the image's pixel size"""
        validate_source(image, "image")
        kind = ImageKind.from_filename(image.name)
        if width is None or height is None:
            natural_width, natural_height = self.encoder.image_size(image.data)
            width = natural_width if width is None else width
            height = natural_height if height is None else height
        return self.model.add_image(page_index, position, width, height, image.data, kind)

    def save(self) -> OutputFile:
        instructions = self.model.commit()
        data = self.encoder.apply_instructions(self.source.data, instructions)
        logger.info(f"Saved {len(instructions)} edits to {self.source.name}")
        return OutputFile(data, PDF_MIME, output_name(self.source.name, "-edited", ".pdf"))
