"""
Unit tests for viewer <-> document coordinate mapping.

Viewer space is top-left origin in raster pixels; document space is
bottom-left origin in points.
"""

import unittest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from layout_engine.errors import PreconditionViolation
from layout_engine.geometry import (
    CoordinateMapper, DocumentInfo, DocumentPoint, PageSize, Point, RasterFrame,
    rect_to_document_space, to_document_space, to_viewer_space
)

LETTER = PageSize(612, 792)


class TestPointMapping(unittest.TestCase):
    """Point-like anchors keep their position, y is flipped"""

    def test_double_scale_raster(self):
        frame = RasterFrame(1224, 1584, 2.0)
        result = to_document_space(Point(100, 200), frame, LETTER)
        self.assertAlmostEqual(result.x, 50.0)
        self.assertAlmostEqual(result.y, 692.0)

    def test_fractional_scale_raster(self):
        frame = RasterFrame(918, 1188, 1.5)
        result = to_document_space(Point(300, 300), frame, LETTER)
        self.assertAlmostEqual(result.x, 200.0)
        self.assertAlmostEqual(result.y, 592.0)

    def test_corners(self):
        frame = RasterFrame(1224, 1584, 2.0)
        top_left = to_document_space(Point(0, 0), frame, LETTER)
        bottom_right = to_document_space(Point(1224, 1584), frame, LETTER)
        self.assertEqual((top_left.x, top_left.y), (0.0, 792.0))
        self.assertAlmostEqual(bottom_right.x, 612.0)
        self.assertAlmostEqual(bottom_right.y, 0.0)

    def test_axes_use_their_own_scale(self):
        # Rounded raster sizes give slightly different factors per axis
        frame = RasterFrame(1000, 1300)
        result = to_document_space(Point(1000, 1300), frame, LETTER)
        self.assertAlmostEqual(result.x, 612.0)
        self.assertAlmostEqual(result.y, 0.0)

    def test_round_trip(self):
        frame = RasterFrame(918, 1188, 1.5)
        for point in (Point(0, 0), Point(17.5, 900), Point(918, 1188)):
            back = to_viewer_space(to_document_space(point, frame, LETTER), frame, LETTER)
            self.assertAlmostEqual(back.x, point.x)
            self.assertAlmostEqual(back.y, point.y)

    def test_zero_area_frame_is_rejected(self):
        with self.assertRaises(PreconditionViolation):
            to_document_space(Point(1, 1), RasterFrame(0, 100), LETTER)
        with self.assertRaises(AssertionError):
            to_viewer_space(DocumentPoint(1, 1), RasterFrame(100, 0), LETTER)


class TestRectMapping(unittest.TestCase):
    """Rectangles are re-anchored at their bottom-left corner"""

    def test_rect_anchor_drops_by_height(self):
        frame = RasterFrame(1224, 1584, 2.0)
        rect = rect_to_document_space(Point(100, 200), 40, 20, frame, LETTER)
        self.assertAlmostEqual(rect.x, 50.0)
        self.assertAlmostEqual(rect.y, 682.0)
        self.assertAlmostEqual(rect.width, 20.0)
        self.assertAlmostEqual(rect.height, 10.0)

    def test_rect_top_edge_matches_point_mapping(self):
        frame = RasterFrame(918, 1188, 1.5)
        top_left = Point(90, 120)
        rect = rect_to_document_space(top_left, 60, 30, frame, LETTER)
        anchor = to_document_space(top_left, frame, LETTER)
        self.assertAlmostEqual(rect.y + rect.height, anchor.y)

    def test_full_page_rect(self):
        frame = RasterFrame(1224, 1584, 2.0)
        rect = rect_to_document_space(Point(0, 0), 1224, 1584, frame, LETTER)
        self.assertAlmostEqual(rect.y, 0.0)
        self.assertAlmostEqual(rect.height, 792.0)


class TestCoordinateMapper(unittest.TestCase):

    def setUp(self):
        self.mapper = CoordinateMapper(RasterFrame(1224, 1584, 2.0), LETTER)

    def test_lengths(self):
        self.assertAlmostEqual(self.mapper.length(4), 2.0)
        self.assertAlmostEqual(self.mapper.vertical_length(16), 8.0)

    def test_mapper_matches_functions(self):
        point = Point(33, 44)
        self.assertEqual(self.mapper.point(point),
                         to_document_space(point, self.mapper.frame, LETTER))
        self.assertEqual(self.mapper.to_viewer(self.mapper.point(point)), point)


class TestDocumentInfo(unittest.TestCase):

    def test_page_lookup(self):
        info = DocumentInfo((LETTER, PageSize(595.28, 841.89)))
        self.assertEqual(info.page_count, 2)
        self.assertEqual(info.page_size(1).height, 841.89)

    def test_page_lookup_out_of_range(self):
        info = DocumentInfo((LETTER,))
        with self.assertRaises(PreconditionViolation):
            info.page_size(1)
        with self.assertRaises(PreconditionViolation):
            info.page_size(-1)


if __name__ == "__main__":
    unittest.main()
