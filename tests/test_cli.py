#!/usr/bin/env python3
"""
Command line tests: each subcommand run in-process against files in tmp_path.
"""

import json
import sys
from io import BytesIO
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

import docx
import fitz
import pytest
from PIL import Image

from docsmith.cli import build_parser, main


def write_pdf(path, pages=3):
    doc = fitz.open()
    for number in range(1, pages + 1):
        doc.new_page(width=612, height=792).insert_text((72, 100), f"Page {number}", fontsize=12)
    doc.save(str(path))
    doc.close()
    return path


def page_texts(path):
    with fitz.open(str(path)) as doc:
        return [page.get_text() for page in doc]


def test_extract(tmp_path, capsys):
    source = write_pdf(tmp_path / "book.pdf")
    target = tmp_path / "subset.pdf"
    assert main(["extract", str(source), "--pages", "2-3", "-o", str(target)]) == 0
    texts = page_texts(target)
    assert len(texts) == 2 and "Page 2" in texts[0]
    assert f"Saved: {target}" in capsys.readouterr().out


def test_default_output_name_in_directory(tmp_path):
    source = write_pdf(tmp_path / "book.pdf")
    main(["number", str(source), "-o", str(tmp_path)])
    assert "1 / 3" in page_texts(tmp_path / "book-numbered.pdf")[0]


def test_watermark_with_image(tmp_path):
    source = write_pdf(tmp_path / "book.pdf", pages=2)
    logo = tmp_path / "logo.png"
    Image.new("RGB", (30, 30), (10, 200, 10)).save(logo)
    target = tmp_path / "marked.pdf"
    main(["watermark", str(source), "--image", str(logo), "--pages", "1", "-o", str(target)])
    with fitz.open(str(target)) as doc:
        assert len(doc[0].get_images()) == 1
        assert len(doc[1].get_images()) == 0


def test_edit_replays_json(tmp_path):
    source = write_pdf(tmp_path / "form.pdf", pages=2)
    Image.new("RGB", (12, 12), (0, 0, 0)).save(tmp_path / "tick.png")
    edits = {
        "scale": 1.0,
        "edits": [
            {"type": "text", "page": 2, "x": 100, "y": 300, "text": "Approved", "size": 14},
            {"type": "image", "page": 2, "x": 80, "y": 290, "path": "tick.png"},
            {"type": "draw", "page": 1, "points": [[10, 10], [60, 60], [110, 10]],
             "color": "#0000ff", "width": 3},
            {"type": "text", "page": 1, "x": 5, "y": 5, "text": ""},
        ],
    }
    (tmp_path / "edits.json").write_text(json.dumps(edits), encoding="utf-8")
    target = tmp_path / "signed.pdf"

    main(["edit", str(source), "--edits", str(tmp_path / "edits.json"), "-o", str(target)])

    with fitz.open(str(target)) as doc:
        rects = doc[1].search_for("Approved")
        assert len(rects) == 1
        assert rects[0].x0 == pytest.approx(100, abs=1)
        assert len(doc[1].get_images()) == 1
        assert len(doc[0].get_drawings()) >= 1
        assert "Approved" not in doc[0].get_text()


def test_edit_rejects_page_outside_document(tmp_path, capsys):
    source = write_pdf(tmp_path / "form.pdf", pages=1)
    (tmp_path / "edits.json").write_text(
        json.dumps([{"type": "text", "page": 4, "text": "x"}]), encoding="utf-8")
    with pytest.raises(SystemExit) as exit_info:
        main(["edit", str(source), "-e", str(tmp_path / "edits.json")])
    assert exit_info.value.code == 1
    assert "between 1 and 1" in capsys.readouterr().err


@pytest.mark.parametrize("edit, message", [
    ({"type": "image", "page": 1}, '"path"'),
    ({"type": "draw", "page": 1, "points": [[10, 10], [20]]}, "[x, y] number pairs"),
    ({"type": "draw", "page": 1, "points": [["a", "b"]]}, "[x, y] number pairs"),
    ("just text", "JSON object"),
])
def test_edit_rejects_malformed_records(tmp_path, capsys, edit, message):
    source = write_pdf(tmp_path / "form.pdf", pages=1)
    (tmp_path / "edits.json").write_text(json.dumps([edit]), encoding="utf-8")
    with pytest.raises(SystemExit) as exit_info:
        main(["edit", str(source), "-e", str(tmp_path / "edits.json"), "-o", str(tmp_path)])
    assert exit_info.value.code == 1
    assert message in capsys.readouterr().err
    assert not (tmp_path / "form-edited.pdf").exists()


def test_number_font_and_margin(tmp_path):
    source = write_pdf(tmp_path / "book.pdf", pages=1)
    target = tmp_path / "numbered.pdf"
    main(["number", str(source), "--position", "top-left", "--margin", "100",
          "--font", "Courier", "-o", str(target)])
    with fitz.open(str(target)) as doc:
        rects = doc[0].search_for("1 / 1")
        assert len(rects) == 1
        assert rects[0].x0 == pytest.approx(100, abs=1)
        assert rects[0].y0 > 90
        fonts = {span["font"] for block in doc[0].get_text("dict")["blocks"]
                 for line in block.get("lines", []) for span in line["spans"]
                 if "1 / 1" in span["text"]}
        assert any("Cour" in font for font in fonts)


def test_unwritable_output(tmp_path, capsys):
    source = write_pdf(tmp_path / "book.pdf", pages=1)
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    with pytest.raises(SystemExit) as exit_info:
        main(["extract", str(source), "--pages", "1", "-o", str(blocker / "out.pdf")])
    assert exit_info.value.code == 1
    assert "Could not write output" in capsys.readouterr().err


def test_word_round_trip(tmp_path):
    document = docx.Document()
    document.add_paragraph("Hello from Word")
    buffer = BytesIO()
    document.save(buffer)
    (tmp_path / "letter.docx").write_bytes(buffer.getvalue())

    main(["word-to-pdf", str(tmp_path / "letter.docx"), "-o", str(tmp_path)])
    pdf_path = tmp_path / "letter.pdf"
    with fitz.open(str(pdf_path)) as doc:
        assert doc.page_count == 1

    text_pdf = write_pdf(tmp_path / "text.pdf", pages=1)
    main(["pdf-to-word", str(text_pdf), "--format", "txt", "-o", str(tmp_path)])
    assert (tmp_path / "text.txt").read_text(encoding="utf-8") == "Page 1\n"


def test_user_message_on_error(tmp_path, capsys):
    source = write_pdf(tmp_path / "book.pdf")
    with pytest.raises(SystemExit) as exit_info:
        main(["extract", str(source), "--pages", "7"])
    assert exit_info.value.code == 1
    assert "Invalid page range" in capsys.readouterr().err


def test_corrupt_input(tmp_path, capsys):
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"not really a pdf")
    with pytest.raises(SystemExit):
        main(["number", str(broken)])
    assert "corrupted or password-protected" in capsys.readouterr().err


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
