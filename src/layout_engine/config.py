"""Configuration for the layout and annotation engine."""

from dataclasses import dataclass


@dataclass
class EngineConfig:
    """Tunable constants shared by the engine and its collaborators."""

    # Layout reconstruction
    same_line_tolerance: float = 2.0  # document units
    paragraph_gap_factor: float = 1.5

    # Pagination: residue below this is treated as float noise, not content
    pagination_epsilon: float = 0.1

    # A4 in points
    page_width: float = 595.28
    page_height: float = 841.89

    # Markup rendering (Word to PDF)
    markup_render_width: float = 794.0  # ~210mm at 96dpi
    markup_padding: float = 38.0
    markup_raster_scale: float = 2.0
    markup_font_size: float = 12.0

    # Page rasters shown to the editor
    viewer_render_scale: float = 1.5

    # Stamps
    page_number_margin: float = 36.0
    watermark_margin: float = 50.0
    watermark_tile_gap: float = 100.0


# Global configuration instance
CONFIG = EngineConfig()
