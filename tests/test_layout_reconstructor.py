"""
Unit tests for paragraph reconstruction from positioned text runs.
"""

import unittest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from layout_engine.layout import (
    PAGE_BREAK, GlyphRun, PageText, group_lines, pages_of, reading_order,
    reconstruct, reconstruct_page
)


def run(text, x, y, height=12.0):
    return GlyphRun(text=text, x=x, y=y, height=height)


class TestReadingOrder(unittest.TestCase):

    def test_top_of_page_first(self):
        runs = [run("bottom", 72, 100), run("top", 72, 700), run("middle", 72, 400)]
        self.assertEqual([r.text for r in reading_order(runs)], ["top", "middle", "bottom"])

    def test_left_to_right_within_line(self):
        runs = [run("world", 200, 700.5), run("Hello", 50, 700)]
        self.assertEqual([r.text for r in reading_order(runs)], ["Hello", "world"])

    def test_baselines_two_units_apart_are_different_lines(self):
        runs = [run("right", 300, 700), run("left", 10, 702)]
        self.assertEqual([r.text for r in reading_order(runs)], ["left", "right"])
        runs = [run("right", 300, 702), run("left", 10, 700)]
        self.assertEqual([r.text for r in reading_order(runs)], ["right", "left"])

    def test_group_lines(self):
        runs = [run("b", 100, 699), run("a", 10, 700), run("c", 10, 680)]
        lines = group_lines(runs)
        self.assertEqual([[r.text for r in line] for line in lines], [["a", "b"], ["c"]])


class TestReconstructPage(unittest.TestCase):

    def test_empty_page(self):
        self.assertEqual(reconstruct_page([]), [])

    def test_close_lines_join(self):
        runs = [run("Hello", 72, 700), run("world", 72, 686)]
        self.assertEqual(reconstruct_page(runs), ["Hello world"])

    def test_large_gap_splits(self):
        runs = [run("First", 72, 700), run("Second", 72, 650)]
        self.assertEqual(reconstruct_page(runs), ["First", "Second"])

    def test_gap_threshold_is_one_and_a_half_heights(self):
        self.assertEqual(reconstruct_page([run("a", 0, 700), run("b", 0, 682)]), ["a b"])
        self.assertEqual(reconstruct_page([run("a", 0, 700), run("b", 0, 681.9)]), ["a", "b"])

    def test_tallest_run_of_paragraph_sets_threshold(self):
        # A tall run raises the threshold only until its paragraph ends
        runs = [
            run("Heading", 72, 700, height=30),
            run("Body one", 72, 600, height=10),
            run("Body two", 72, 580, height=10),
        ]
        self.assertEqual(reconstruct_page(runs), ["Heading", "Body one", "Body two"])

    def test_whitespace_is_normalized(self):
        runs = [run("  spaced   out ", 72, 700), run("\ttext\n", 72, 690)]
        self.assertEqual(reconstruct_page(runs), ["spaced out text"])

    def test_close_baselines_merge_and_far_one_splits(self):
        runs = [run("one", 72, 100), run("two", 72, 98), run("three", 72, 40)]
        self.assertEqual(reconstruct_page(runs), ["one two", "three"])

    def test_input_order_does_not_matter(self):
        runs = [run("three", 72, 500), run("one", 72, 700), run("two", 150, 700)]
        self.assertEqual(reconstruct_page(runs), ["one two", "three"])


class TestReconstructDocument(unittest.TestCase):

    def test_page_breaks_between_pages(self):
        items = reconstruct([[run("p1", 0, 700)], [], [run("p3", 0, 700)]])
        self.assertEqual(items, [
            PageText(1, ["p1"]),
            PAGE_BREAK,
            PageText(2, []),
            PAGE_BREAK,
            PageText(3, ["p3"]),
        ])

    def test_single_page_has_no_break(self):
        self.assertEqual(reconstruct([[run("only", 0, 0)]]), [PageText(1, ["only"])])

    def test_no_pages(self):
        self.assertEqual(reconstruct([]), [])

    def test_pages_of(self):
        items = reconstruct([[run("a", 0, 0)], [run("b", 0, 0)]])
        self.assertEqual([p.page_number for p in pages_of(items)], [1, 2])


if __name__ == "__main__":
    unittest.main()
