"""Read message files from disk into normalized text."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from bs4 import BeautifulSoup
from docx import Document

from .normalize import normalize_content

logger = logging.getLogger(__name__)

MESSAGE_EXTENSIONS = {".eml", ".msg", ".txt"}
HTML_EXTENSIONS = {".html", ".htm"}
DOCX_EXTENSIONS = {".docx"}

SUPPORTED_EXTENSIONS = MESSAGE_EXTENSIONS | HTML_EXTENSIONS | DOCX_EXTENSIONS


@dataclass
class LoadedDocument:
    path: Path
    kind: str
    text: str
    size: int


def load_document(path: str | Path, *, encodings: Iterable[str] | None = None) -> LoadedDocument:
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Document not found: {file_path}")
    suffix = file_path.suffix.lower()
    raw_bytes = file_path.read_bytes()
    if suffix in HTML_EXTENSIONS:
        kind = "html"
        markup = normalize_content(raw_bytes, name=file_path.name, encodings=encodings)
        text = normalize_content(html_to_text(markup))
    elif suffix in DOCX_EXTENSIONS:
        kind = "docx"
        text = normalize_content(docx_to_text(file_path))
    else:
        if suffix not in MESSAGE_EXTENSIONS:
            logger.debug("Unrecognised suffix %s, reading %s as raw bytes", suffix, file_path)
        kind = suffix.lstrip(".") or "raw"
        text = normalize_content(raw_bytes, name=file_path.name, encodings=encodings)
    logger.info("Loaded %s (%s, %d bytes, %d chars)", file_path.name, kind, len(raw_bytes), len(text))
    return LoadedDocument(path=file_path, kind=kind, text=text, size=len(raw_bytes))


def html_to_text(markup: str) -> str:
    soup = BeautifulSoup(markup, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    lines = [line.strip() for line in soup.get_text("\n").splitlines()]
    return "\n".join(line for line in lines if line)


def docx_to_text(path: Path) -> str:
    try:
        document = Document(str(path))
    except Exception as exc:  # pragma: no cover - dependency errors
        logger.warning("Failed to read DOCX %s: %s", path, exc)
        return ""
    return "\n".join(paragraph.text for paragraph in document.paragraphs)
