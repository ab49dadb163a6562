"""
In-process fakes for the embedding, generation and PDF capabilities.

They count their calls so tests can assert how often the real services
would have been hit.
"""
import asyncio
import hashlib
import threading
import time
from pathlib import Path
from typing import List, Optional

from core.exceptions import ProcessingError
from rag_services.pdf_processor import PDFProcessor

PDF_HEADER = b"%PDF-1.4\n"

DOC_TEXT = (
    "Quarterly report for the northern region. Revenue grew twelve percent compared "
    "to the previous quarter, driven by strong demand for solar panels. Operating costs "
    "stayed flat because the new warehouse opened on schedule. The summary: the region "
    "is profitable and expects further growth next year. Staffing increased by forty "
    "people, mostly in installation crews. Customer satisfaction scores reached a record "
    "high of ninety one points. Risks include supply chain delays for inverters."
)

OTHER_TEXT = (
    "Field guide to alpine birds. The golden eagle nests on cliff ledges and hunts "
    "marmots. The alpine chough gathers in noisy flocks near ski stations. Ptarmigan "
    "turn white in winter and survive on buds and twigs under the snow."
)


class FakeEmbeddingService:
    dim = 8

    def __init__(self, gate: Optional[threading.Event] = None, fail: bool = False):
        self.calls: List[List[str]] = []
        self.query_calls: List[str] = []
        self.gate = gate
        self.fail = fail

    @classmethod
    def vector(cls, text: str) -> List[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [b / 255.0 for b in digest[:cls.dim]]

    async def _wait_for_gate(self) -> None:
        deadline = time.monotonic() + 10
        while self.gate is not None and not self.gate.is_set() and time.monotonic() < deadline:
            await asyncio.sleep(0.005)

    async def get_embeddings_async(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        await self._wait_for_gate()
        if self.fail:
            raise RuntimeError("embedding quota exceeded")
        return [self.vector(text) for text in texts]

    async def embed_query(self, text: str) -> List[float]:
        self.query_calls.append(text)
        if self.fail:
            raise RuntimeError("embedding quota exceeded")
        return self.vector(text)


class FakeLLMService:
    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    def generate_answer(self, question: str, context: str) -> str:
        self.calls.append((question, context))
        if self.fail:
            raise RuntimeError("model overloaded")
        return f"Answer #{len(self.calls)} to '{question}' from {len(context)} chars of context"


class FakePDFProcessor(PDFProcessor):
    """Treats everything after the PDF header as the document text."""

    def __init__(self):
        self.loaded: List[str] = []

    def load_text(self, path: str) -> str:
        self.loaded.append(path)
        raw = Path(path).read_bytes()
        if not raw.startswith(PDF_HEADER):
            raise ProcessingError(f"Failed to read PDF: {path} is corrupt")
        return self._clean_text(raw[len(PDF_HEADER):].decode("utf-8"))


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def write_pdf(path: Path, text: str = DOC_TEXT) -> Path:
    path.write_bytes(PDF_HEADER + text.encode("utf-8"))
    return path


