import base64
import binascii
import os
import re
from pathlib import Path
from typing import List

from applytrack.models.models import ResumeDocument
from applytrack.utils.exceptions import DecodeError
from applytrack.utils.logging_config import get_logger

logger = get_logger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
PDF_MAGIC = b"%PDF"


def clean_text(x: str) -> str:
    """Normalize line endings and drop control characters (tabs and newlines survive)."""
    x = (x or "").replace("\r\n", "\n").replace("\r", "\n")
    return _CONTROL_CHARS.sub("", x)


def decode_resume_bytes(data: bytes, file_name: str = None) -> str:
    """
    Turn a plain-text resume payload into text.

    PDFs and other binary documents need a text extraction step that lives
    outside this service, so they are rejected here instead of being scored
    as garbage.
    """
    if data.startswith(PDF_MAGIC):
        raise DecodeError("PDF resumes must be converted to text before matching",
                          kind=DecodeError.UNSUPPORTED_FORMAT, file_name=file_name)

    text = data.decode("utf-8", errors="replace")
    if "�" in text or len(text) < len(data) * 0.5:
        text = data.decode("latin-1")
    return clean_text(text)


def decode_base64_to_text(b64_string: str, file_name: str = None) -> str:
    """Decode base64 content to text"""
    try:
        decoded_bytes = base64.b64decode(b64_string, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 resume: {e}", kind=DecodeError.DECODE_FAILURE,
                          file_name=file_name, cause=e) from e
    return decode_resume_bytes(decoded_bytes, file_name=file_name)


def read_txt(p: Path) -> str:
    return decode_resume_bytes(p.read_bytes(), file_name=p.name)


def load_folder(folder: str) -> List[ResumeDocument]:
    """Read every file under ``folder`` as a resume document, sorted by path."""
    out = []
    for root, _, files in os.walk(folder):
        for f in files:
            p = Path(root) / f
            out.append(p)

    documents = []
    for p in sorted(out):
        if p.suffix.lower() != ".txt":
            documents.append(ResumeDocument(
                resume_id=p.stem, file_name=p.name,
                error_kind=DecodeError.UNSUPPORTED_FORMAT,
                error_message=f"Unsupported resume format: {p.suffix or 'none'}",
            ))
            continue
        try:
            documents.append(ResumeDocument(resume_id=p.stem, file_name=p.name, text=read_txt(p)))
        except DecodeError as e:
            logger.warning(f"Could not read resume {p}: {e.message}")
            documents.append(ResumeDocument(
                resume_id=p.stem, file_name=p.name, error_kind=e.kind, error_message=e.message,
            ))
    logger.info(f"Loaded {len(documents)} resume files from {folder}")
    return documents
