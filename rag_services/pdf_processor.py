"""
PDF text extraction and chunking
"""
import io
import logging
import re
from pathlib import Path
from typing import List
from pypdf import PdfReader

from core.exceptions import ProcessingError

logger = logging.getLogger(__name__)


class PDFProcessor:
    """Handles PDF text extraction and chunking."""

    @staticmethod
    def extract_text(pdf_bytes: bytes) -> str:
        """Extract and clean text from PDF bytes."""
        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
        except Exception as e:
            raise ProcessingError(f"Failed to read PDF: {e}") from e

        text_pages = []
        for i, page in enumerate(reader.pages):
            try:
                extracted = page.extract_text()
            except Exception as e:
                # One broken page should not sink the whole document
                logger.warning("Skipping page %d: %s", i + 1, e)
                continue
            if extracted:
                text_pages.append(extracted)

        return PDFProcessor._clean_text(" ".join(text_pages))

    def load_text(self, path: str) -> str:
        """Read a PDF from disk and return its cleaned text. Blocking."""
        try:
            pdf_bytes = Path(path).read_bytes()
        except OSError as e:
            raise ProcessingError(f"Failed to open document {path}: {e}") from e
        return self.extract_text(pdf_bytes)

    @staticmethod
    def _clean_text(text: str) -> str:
        """Clean and normalize text."""
        text = re.sub(r"-\s*\n", "", text)
        text = text.replace("\n", " ")
        text = re.sub(r"\s+", " ", text).strip()
        return text

    @staticmethod
    def create_chunks(text: str, chunk_size: int, overlap: int) -> List[str]:
        if not text:
            return []

        if overlap >= chunk_size:
            raise ValueError("overlap must be smaller than chunk_size")

        chunks = []
        start = 0
        text_len = len(text)

        while start < text_len:
            end = min(start + chunk_size, text_len)
            chunks.append(text[start:end])
            if end == text_len:
                break
            start = end - overlap

        return chunks
