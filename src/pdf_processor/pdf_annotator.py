"""
PDF Annotator - Encode draw instructions and rasters into PDF files
This module uses PyMuPDF (fitz) to place text, images and strokes given in
document space (origin bottom-left) onto PDF pages, whose own coordinate
system has its origin top-left.
"""

import fitz  # PyMuPDF
from io import BytesIO
from typing import Dict, Optional, Sequence, Tuple
import logging
import math

from PIL import Image, UnidentifiedImageError

from layout_engine.errors import (
    DocumentToolError, InvalidInputError, PreconditionViolation, RenderFailure
)
from layout_engine.geometry import PageSize
from layout_engine.instructions import DrawImage, DrawInstruction, DrawPath, DrawText
from layout_engine.interfaces import RasterImage
from layout_engine.page_range import PageRange
from layout_engine.pagination import Placement, scaled_image_height, visible_window

from .pdf_reader import open_pdf

logger = logging.getLogger(__name__)


def image_size(data: bytes) -> Tuple[int, int]:
    """Pixel size of PNG/JPEG bytes"""
    try:
        with Image.open(BytesIO(data)) as image:
            return image.size
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidInputError(str(e), user_message="The image could not be read.") from e


def _png_bytes(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class PDFAnnotator:
    """Encode collaborator: writes draw instructions and rasters with PyMuPDF"""

    def __init__(self, password: Optional[str] = None):
        self.password = password
        self._fonts: Dict[str, fitz.Font] = {}

    # --- Text metrics ---

    def text_width(self, text: str, font: str, size: float) -> float:
        return fitz.get_text_length(text, fontname=font, fontsize=size)

    def text_height(self, font: str, size: float) -> float:
        if font not in self._fonts:
            self._fonts[font] = fitz.Font(font)
        metrics = self._fonts[font]
        return (metrics.ascender - metrics.descender) * size

    def image_size(self, data: bytes) -> Tuple[int, int]:
        return image_size(data)

    # --- Encoding ---

    def page_count(self, data: bytes) -> int:
        with open_pdf(data, self.password) as doc:
            return doc.page_count

    def apply_instructions(self, data: bytes, instructions: Sequence[DrawInstruction]) -> bytes:
        """
        Draw instructions onto a copy of the source PDF

        Args:
            data: Source PDF bytes
            instructions: Document-space draw instructions

        Returns:
            Bytes of the new PDF
        """
        doc = open_pdf(data, self.password)
        try:
            for instruction in instructions:
                if not 0 <= instruction.page_index < doc.page_count:
                    raise PreconditionViolation(
                        f"Instruction for page {instruction.page_index} in a "
                        f"{doc.page_count}-page document"
                    )
                page = doc[instruction.page_index]
                if isinstance(instruction, DrawText):
                    self._draw_text(page, instruction)
                elif isinstance(instruction, DrawImage):
                    self._draw_image(page, instruction)
                elif isinstance(instruction, DrawPath):
                    self._draw_path(page, instruction)
                else:
                    raise PreconditionViolation(f"Unknown instruction: {instruction!r}")
            output = doc.tobytes(garbage=4, deflate=True)
        except DocumentToolError:
            raise
        except Exception as e:
            logger.error(f"Error drawing onto PDF: {e}")
            raise RenderFailure(str(e)) from e
        finally:
            doc.close()

        logger.info(f"Applied {len(instructions)} draw instructions")
        return output

    def _draw_text(self, page: fitz.Page, instruction: DrawText):
        point = fitz.Point(instruction.x, page.rect.height - instruction.y)
        options = {
            "fontsize": instruction.size,
            "fontname": instruction.font,
            "color": instruction.color,
            "fill_opacity": instruction.opacity,
        }
        if instruction.rotation:
            # Flipping the y axis reverses the rotation direction
            options["morph"] = (point, fitz.Matrix(-instruction.rotation))
        page.insert_text(point, instruction.text, **options)

    def _draw_image(self, page: fitz.Page, instruction: DrawImage):
        top = page.rect.height - instruction.y - instruction.height
        rect = fitz.Rect(instruction.x, top,
                         instruction.x + instruction.width, top + instruction.height)
        stream = instruction.data

        if instruction.opacity < 1.0 or instruction.rotation:
            with Image.open(BytesIO(instruction.data)) as source:
                image = source.convert("RGBA")
            if instruction.opacity < 1.0:
                alpha = image.getchannel("A").point(lambda a: int(a * instruction.opacity))
                image.putalpha(alpha)
            if instruction.rotation:
                # Keep the centre; the rotated bounding box grows around it
                ratio_x = instruction.width / image.width
                ratio_y = instruction.height / image.height
                image = image.rotate(instruction.rotation, expand=True)
                centre = fitz.Point((rect.x0 + rect.x1) / 2, (rect.y0 + rect.y1) / 2)
                half_w = image.width * ratio_x / 2
                half_h = image.height * ratio_y / 2
                rect = fitz.Rect(centre.x - half_w, centre.y - half_h,
                                 centre.x + half_w, centre.y + half_h)
            stream = _png_bytes(image)

        if not page.rect.intersects(rect):
            logger.debug(f"Skipping image outside page {page.number}: {rect}")
            return
        page.insert_image(rect, stream=stream, keep_proportion=False, overlay=True)

    def _draw_path(self, page: fitz.Page, instruction: DrawPath):
        height = page.rect.height
        points = [fitz.Point(x, height - y) for x, y in instruction.points]
        if not points:
            return
        shape = page.new_shape()
        if len(points) == 1:
            shape.draw_line(points[0], points[0])
        else:
            shape.draw_polyline(points)
        shape.finish(color=instruction.color, width=instruction.width,
                     closePath=False, lineCap=1, lineJoin=1)
        shape.commit()

    def build_from_raster(self, raster: RasterImage, placements: Sequence[Placement],
                          page_size: PageSize) -> bytes:
        """
        Lay a tall raster out over fixed-size pages

        Each placement shows the window of the image that falls on its page;
        only that slice is embedded.
        """
        frame = raster.frame
        scaled_height = scaled_image_height(frame.height, frame.width, page_size.width)
        pixels_per_unit = frame.width / page_size.width

        doc = fitz.open()
        try:
            with Image.open(BytesIO(raster.png)) as image:
                for placement in placements:
                    page = doc.new_page(width=page_size.width, height=page_size.height)
                    top, bottom = visible_window(placement, scaled_height, page_size.height)
                    row_top = int(round(top * pixels_per_unit))
                    row_bottom = min(int(math.ceil(bottom * pixels_per_unit)), image.height)
                    if row_bottom <= row_top:
                        continue
                    tile = image.crop((0, row_top, image.width, row_bottom))
                    rect = fitz.Rect(0, 0, page_size.width, (row_bottom - row_top) / pixels_per_unit)
                    page.insert_image(rect, stream=_png_bytes(tile), keep_proportion=False)
            if doc.page_count != len(placements):
                raise PreconditionViolation(
                    f"Built {doc.page_count} pages for {len(placements)} placements"
                )
            output = doc.tobytes(garbage=4, deflate=True)
        except DocumentToolError:
            raise
        except Exception as e:
            logger.error(f"Error building PDF from raster: {e}")
            raise RenderFailure(str(e)) from e
        finally:
            doc.close()

        logger.info(f"Built {len(placements)}-page PDF from {frame.width}x{frame.height}px raster")
        return output

    def extract_pages(self, data: bytes, page_range: PageRange) -> bytes:
        """Keep only the selected pages, in ascending order"""
        doc = open_pdf(data, self.password)
        try:
            doc.select(page_range.to_indices())
            output = doc.tobytes(garbage=4, deflate=True)
        except Exception as e:
            logger.error(f"Error extracting pages {list(page_range)}: {e}")
            raise RenderFailure(str(e)) from e
        finally:
            doc.close()
        return output
