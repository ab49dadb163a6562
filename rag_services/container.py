"""
Wires the RAG services together for one application instance
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.config import Settings
from rag_services.cache import QueryCache
from rag_services.embeddings import EmbeddingService
from rag_services.ingestion import IngestionPipeline
from rag_services.llm import LLMService
from rag_services.pdf_processor import PDFProcessor
from rag_services.qa import QAEngine
from rag_services.state import SessionRegistry
from rag_services.vector_store import VectorIndexStore


@dataclass
class RAGServices:
    settings: Settings
    sessions: SessionRegistry
    cache: QueryCache
    index_store: VectorIndexStore
    pipeline: IngestionPipeline
    qa_engine: QAEngine

    @property
    def upload_dir(self) -> Path:
        return Path(self.settings.UPLOAD_DIR)


def build_services(
    settings: Settings,
    embedding_service: Optional[EmbeddingService] = None,
    llm_service: Optional[LLMService] = None,
    pdf_processor: Optional[PDFProcessor] = None,
) -> RAGServices:
    """Build the service graph; capabilities can be swapped out (tests do)."""
    embedding_service = embedding_service or EmbeddingService(
        settings.EMBEDDING_MODEL, api_key=settings.OPENAI_API_KEY
    )
    llm_service = llm_service or LLMService(
        model=settings.CHAT_MODEL,
        temperature=settings.TEMPERATURE,
        max_tokens=settings.MAX_TOKENS,
        api_key=settings.OPENAI_API_KEY,
    )

    sessions = SessionRegistry()
    cache = QueryCache(ttl_seconds=settings.CACHE_TTL_SECONDS, max_entries=settings.CACHE_MAX_ENTRIES)
    index_store = VectorIndexStore(Path(settings.VECTOR_STORE_DIR), embedding_service)
    pipeline = IngestionPipeline(
        sessions,
        index_store,
        pdf_processor or PDFProcessor(),
        chunk_size=settings.CHUNK_SIZE,
        chunk_overlap=settings.CHUNK_OVERLAP,
    )
    qa_engine = QAEngine(index_store, cache, llm_service, top_k=settings.TOP_K_RESULTS)

    return RAGServices(
        settings=settings,
        sessions=sessions,
        cache=cache,
        index_store=index_store,
        pipeline=pipeline,
        qa_engine=qa_engine,
    )
