"""
File Utilities - Source/output file handling shared by the tools
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple
import logging
import mimetypes

import chardet

from layout_engine.errors import InvalidInputError

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
WORD_HTML_MIME = "application/msword"

# Accepted (extensions, MIME types) per tool family
ACCEPTED_INPUTS: Dict[str, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    "pdf": ((".pdf",), (PDF_MIME,)),
    "word": ((".docx", ".html", ".htm", ".txt"), (DOCX_MIME, "text/html", "text/plain")),
    "image": ((".png", ".jpg", ".jpeg"), ("image/png", "image/jpeg")),
}

REJECTION_MESSAGES = {
    "pdf": "Only PDF files are accepted.",
    "word": "Only .docx files are supported. The legacy .doc format cannot be converted.",
    "image": "Only JPG and PNG images are accepted.",
}


@dataclass(frozen=True)
class SourceFile:
    """Raw bytes of a user-selected file"""
    name: str
    data: bytes
    mime_type: str = ""

    @property
    def stem(self) -> str:
        return Path(self.name).stem

    @property
    def suffix(self) -> str:
        return Path(self.name).suffix.lower()


@dataclass(frozen=True)
class OutputFile:
    """Finished result handed to whatever saves or downloads it"""
    data: bytes
    mime_type: str
    filename: str


def load_source_file(file_path: str) -> SourceFile:
    """
    Read a file from disk

    Args:
        file_path: Path to the file

    Returns:
        SourceFile with a MIME type guessed from the extension

    Raises:
        InvalidInputError: If the path does not point at a readable file
    """
    path = Path(file_path)
    if not path.is_file():
        raise InvalidInputError(f"Not a file: {file_path}",
                                user_message=f"File does not exist: {file_path}")
    mime_type, _ = mimetypes.guess_type(path.name)
    return SourceFile(name=path.name, data=path.read_bytes(), mime_type=mime_type or "")


def validate_source(source: SourceFile, kind: str) -> SourceFile:
    """
    Check a file against the inputs a tool family accepts

    Args:
        source: The selected file
        kind: "pdf", "word" or "image"

    Raises:
        InvalidInputError: If neither the extension nor the MIME type is accepted
    """
    extensions, mime_types = ACCEPTED_INPUTS[kind]
    if source.suffix in extensions or source.mime_type in mime_types:
        return source
    logger.debug(f"Rejected {source.name} ({source.mime_type or 'unknown type'}) for {kind} tool")
    raise InvalidInputError(f"{source.name} is not a {kind} input",
                            user_message=REJECTION_MESSAGES[kind])


def detect_encoding(data: bytes) -> str:
    """
    Detect the encoding of raw text

    Returns:
        Detected encoding name; utf-8 when detection is not confident
    """
    result = chardet.detect(data[:10000])
    encoding = result.get("encoding") or "utf-8"
    confidence = result.get("confidence") or 0
    logger.debug(f"Detected encoding {encoding} (confidence: {confidence:.2f})")
    if confidence < 0.5:
        return "utf-8"
    return encoding


def decode_text(data: bytes, encoding: Optional[str] = None) -> str:
    """Decode text bytes, trying common fallbacks before replacing bad bytes"""
    if data.startswith(b"\xef\xbb\xbf"):
        return data[3:].decode("utf-8", errors="replace")
    encoding = encoding or detect_encoding(data)
    for candidate in (encoding, "utf-8", "cp1252", "latin-1"):
        try:
            return data.decode(candidate)
        except (UnicodeDecodeError, LookupError):
            continue
    logger.warning("Decoding text with replacement characters")
    return data.decode("utf-8", errors="replace")


def clean_filename(filename: str) -> str:
    """Make a filename safe for the file system"""
    invalid_chars = '<>:"/\\|?*'
    cleaned = filename
    for char in invalid_chars:
        cleaned = cleaned.replace(char, '_')

    cleaned = cleaned.strip(' .')
    if len(cleaned) > 200:
        cleaned = cleaned[:200]
    return cleaned or "document"


def output_name(source_name: str, suffix: str, extension: str) -> str:
    """'report.pdf', '-numbered', '.pdf' -> 'report-numbered.pdf'"""
    return clean_filename(f"{Path(source_name).stem}{suffix}") + extension


def write_output(output: OutputFile, target: Optional[str] = None) -> Path:
    """
    Write an output file

    Args:
        output: Finished output
        target: File path, or a directory to place output.filename in;
            the current directory when omitted

    Returns:
        Path written
    """
    path = Path(target) if target else Path(output.filename)
    if path.is_dir():
        path = path / output.filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(output.data)
    logger.info(f"Wrote {len(output.data)} bytes to {path}")
    return path
