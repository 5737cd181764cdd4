"""
Markup Renderer - Lay out HTML on one tall page and rasterize it

The markup is flowed into a fixed width with PyMuPDF's Story engine.
The page is made exactly as tall as the content, then rendered to a
single bitmap for pagination.
"""

import fitz  # PyMuPDF
from io import BytesIO
from typing import Optional
import logging

from layout_engine.config import CONFIG
from layout_engine.errors import DocumentToolError, RenderFailure
from layout_engine.geometry import RasterFrame
from layout_engine.interfaces import RasterImage

logger = logging.getLogger(__name__)

# Story pages grow by doubling until the content fits
INITIAL_LAYOUT_HEIGHT = 2000.0
MAX_LAYOUT_HEIGHT = 2000.0 * 2 ** 10


class HtmlRenderer:
    """Render collaborator for simplified markup"""

    def __init__(self, scale: Optional[float] = None, padding: Optional[float] = None,
                 font_size: Optional[float] = None):
        self.scale = CONFIG.markup_raster_scale if scale is None else scale
        self.padding = CONFIG.markup_padding if padding is None else padding
        self.font_size = CONFIG.markup_font_size if font_size is None else font_size

    def _css(self) -> str:
        return (
            f"body {{font-family: sans-serif; font-size: {self.font_size}pt; color: black;}}\n"
            "table {border-collapse: collapse;}\n"
            "td, th {border: 1px solid #444; padding: 2px 4px;}\n"
        )

    def _measure(self, story: fitz.Story, width: float) -> float:
        """Height of the laid-out content including padding"""
        height = INITIAL_LAYOUT_HEIGHT
        while True:
            where = fitz.Rect(self.padding, self.padding, width - self.padding, height)
            more, filled = story.place(where)
            if not more:
                break
            if height >= MAX_LAYOUT_HEIGHT:
                raise RenderFailure(f"Content taller than {MAX_LAYOUT_HEIGHT} units")
            height *= 2
            story.reset()
        story.reset()
        content_bottom = max(filled.y1, self.padding) if not filled.is_empty else self.padding
        return content_bottom + self.padding

    def render_markup(self, markup: str, width: float) -> RasterImage:
        """
        Render markup to a single raster

        Args:
            markup: HTML fragment
            width: Layout width in points

        Returns:
            RasterImage whose frame scale is pixels per point

        Raises:
            RenderFailure: If layout or rasterization fails
        """
        if width <= 2 * self.padding:
            raise RenderFailure(f"Render width {width} leaves no room for content")
        try:
            story = fitz.Story(html=markup, user_css=self._css())
            page_height = self._measure(story, width)

            buffer = BytesIO()
            writer = fitz.DocumentWriter(buffer)
            try:
                device = writer.begin_page(fitz.Rect(0, 0, width, page_height))
                story.place(fitz.Rect(self.padding, self.padding, width - self.padding, page_height))
                story.draw(device)
                writer.end_page()
            finally:
                writer.close()

            with fitz.open(stream=buffer.getvalue(), filetype="pdf") as doc:
                pix = doc[0].get_pixmap(matrix=fitz.Matrix(self.scale, self.scale), alpha=False)
                png = pix.tobytes("png")
                frame = RasterFrame(pix.width, pix.height, self.scale)
        except DocumentToolError:
            raise
        except Exception as e:
            logger.error(f"Error rendering markup: {e}")
            raise RenderFailure(str(e)) from e

        logger.debug(f"Rendered markup to {frame.width}x{frame.height}px raster")
        return RasterImage(frame, png)
