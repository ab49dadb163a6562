"""
Document ingestion with single-flight deduplication per document
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.exceptions import ProcessingError
from rag_services.pdf_processor import PDFProcessor
from rag_services.state import SessionRegistry
from rag_services.vector_store import VectorIndexStore

logger = logging.getLogger(__name__)


@dataclass
class IngestionJob:
    document_ref: str
    session_ids: List[str] = field(default_factory=list)
    task: Optional["asyncio.Task[bool]"] = None


class IngestionPipeline:
    """Turns an uploaded document into an indexed one and reports the outcome
    on every session waiting for it.

    At most one job runs per document reference. ``ingest`` does its
    check-and-register without awaiting anything, so two requests for the same
    document on the event loop cannot both start work.
    """

    def __init__(
        self,
        sessions: SessionRegistry,
        index_store: VectorIndexStore,
        pdf_processor: PDFProcessor,
        chunk_size: int = 500,
        chunk_overlap: int = 50,
    ):
        if chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        self._sessions = sessions
        self._index_store = index_store
        self._pdf_processor = pdf_processor
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._in_flight: Dict[str, IngestionJob] = {}

    def ingest(self, document_ref: str, session_id: Optional[str] = None) -> "asyncio.Task[bool]":
        """Schedule ingestion of ``document_ref`` and return its task handle.

        If the document is already being ingested, ``session_id`` joins the
        running job and its existing task is returned. The task resolves to
        True on success and False on failure; it never raises.
        """
        job = self._in_flight.get(document_ref)
        if job is not None:
            if session_id is not None:
                job.session_ids.append(session_id)
            logger.info("Ingestion of %s already in flight, joining it", document_ref)
            return job.task

        job = IngestionJob(document_ref, [session_id] if session_id is not None else [])
        job.task = asyncio.get_running_loop().create_task(self._run(job))
        self._in_flight[document_ref] = job
        logger.info("Ingestion of %s started", document_ref)
        return job.task

    def is_in_flight(self, document_ref: str) -> bool:
        return document_ref in self._in_flight

    def active_tasks(self) -> List["asyncio.Task[bool]"]:
        return [job.task for job in self._in_flight.values()]

    async def drain(self) -> None:
        """Wait for every in-flight ingestion to finish."""
        tasks = self.active_tasks()
        if tasks:
            await asyncio.gather(*tasks)

    async def _run(self, job: IngestionJob) -> bool:
        try:
            await self._process(job.document_ref)
        except Exception as exc:
            logger.exception("Ingestion of %s failed", job.document_ref)
            error = exc if isinstance(exc, ProcessingError) else ProcessingError(str(exc) or type(exc).__name__)
            for session_id in job.session_ids:
                self._sessions.mark_error(session_id, error.message)
            return False
        else:
            logger.info("Ingestion of %s finished", job.document_ref)
            for session_id in job.session_ids:
                self._sessions.mark_ready(session_id)
            return True
        finally:
            self._in_flight.pop(job.document_ref, None)

    async def _process(self, document_ref: str) -> None:
        loop = asyncio.get_running_loop()
        text = await loop.run_in_executor(None, self._pdf_processor.load_text, document_ref)

        chunks = self._pdf_processor.create_chunks(text, self.chunk_size, self.chunk_overlap)
        if not chunks:
            raise ProcessingError("No extractable text found in document")

        key = self._index_store.key_for(document_ref)
        await self._index_store.load_or_build(key, chunks)
