"""
Load-or-build management of persisted per-document vector indexes
"""
import asyncio
import hashlib
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from core.exceptions import IndexNotFoundError
from rag_services.embeddings import EmbeddingService
from rag_services.retrieval import HybridIndex

logger = logging.getLogger(__name__)


class VectorIndexStore:
    """Owns every index handle, on disk under ``root_dir/<key>`` and in memory.

    Builds for a key are serialised with a per-key lock: a build spans
    several suspension points (embedding calls, persisting) and two
    concurrent builders would otherwise overwrite each other. Once a handle
    is loaded it is returned without taking the lock.
    """

    def __init__(self, root_dir: Path, embedding_service: EmbeddingService):
        self.root_dir = Path(root_dir)
        self._embeddings = embedding_service
        self._indexes: Dict[str, HybridIndex] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @staticmethod
    def key_for(document_ref: str) -> str:
        resolved = str(Path(document_ref).resolve())
        return hashlib.sha256(resolved.encode("utf-8")).hexdigest()[:16]

    def index_dir(self, key: str) -> Path:
        return self.root_dir / key

    def exists(self, key: str) -> bool:
        return key in self._indexes or HybridIndex.exists(self.index_dir(key))

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def load_or_build(self, key: str, chunks: Optional[Sequence[str]] = None) -> HybridIndex:
        """Return the index for ``key``, building it from ``chunks`` if none is persisted.

        ``chunks`` is ignored when an index already exists. Raises
        IndexNotFoundError if nothing is persisted and no chunks are given.
        """
        index = self._indexes.get(key)
        if index is not None:
            return index

        async with self._lock_for(key):
            # Another task may have finished while we waited for the lock
            index = self._indexes.get(key)
            if index is not None:
                return index

            directory = self.index_dir(key)
            loop = asyncio.get_running_loop()
            if HybridIndex.exists(directory):
                index = await loop.run_in_executor(None, HybridIndex.load, directory)
                logger.info("Loaded vector index %s (%d chunks)", key, len(index.chunks))
            elif chunks:
                index = await self._build_and_save(key, chunks)
            else:
                raise IndexNotFoundError(key)

            self._indexes[key] = index
            return index

    async def rebuild(self, key: str, chunks: Sequence[str]) -> HybridIndex:
        """Build and persist a fresh index for ``key`` regardless of what exists."""
        if not chunks:
            raise ValueError("cannot rebuild an index without chunks")
        async with self._lock_for(key):
            index = await self._build_and_save(key, chunks)
            self._indexes[key] = index
            return index

    async def _build_and_save(self, key: str, chunks: Sequence[str]) -> HybridIndex:
        embeddings = await self._embeddings.get_embeddings_async(list(chunks))
        loop = asyncio.get_running_loop()
        index = await loop.run_in_executor(None, HybridIndex.from_embeddings, list(chunks), embeddings)
        await loop.run_in_executor(None, index.save, self.index_dir(key))
        logger.info("Built and persisted vector index %s (%d chunks)", key, len(chunks))
        return index

    async def query(self, index: HybridIndex, question: str, k: int) -> List[Tuple[str, float]]:
        """Top-k (chunk text, score) pairs for ``question``, best first."""
        query_embedding = await self._embeddings.embed_query(question)
        return index.search(question, query_embedding, top_k=k)
