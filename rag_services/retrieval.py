"""
Hybrid search index using FAISS and BM25, persisted to a directory
"""
import json
from pathlib import Path
from typing import List, Sequence, Tuple

import faiss
import numpy as np
from rank_bm25 import BM25Okapi

INDEX_FILE = "index.faiss"
CHUNKS_FILE = "chunks.json"


class HybridIndex:
    """Dense (FAISS) and sparse (BM25) indices over one document's chunks."""

    def __init__(self, chunks: List[str], dense_index: "faiss.Index"):
        if len(chunks) != dense_index.ntotal:
            raise ValueError(
                f"chunk count {len(chunks)} does not match index size {dense_index.ntotal}"
            )
        self.chunks = chunks
        self.dense_index = dense_index
        self.bm25_index = BM25Okapi([chunk.lower().split() for chunk in chunks])

    @classmethod
    def from_embeddings(cls, chunks: Sequence[str], embeddings: Sequence[Sequence[float]]) -> "HybridIndex":
        if not chunks:
            raise ValueError("cannot build an index without chunks")
        emb_np = np.array(embeddings).astype('float32')
        dense_index = faiss.IndexFlatL2(emb_np.shape[1])
        dense_index.add(emb_np)
        return cls(list(chunks), dense_index)

    @staticmethod
    def exists(directory: Path) -> bool:
        return (directory / INDEX_FILE).is_file() and (directory / CHUNKS_FILE).is_file()

    def save(self, directory: Path) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        faiss.write_index(self.dense_index, str(directory / INDEX_FILE))
        # Chunks last: exists() only reports a complete index
        (directory / CHUNKS_FILE).write_text(json.dumps(self.chunks), encoding="utf-8")

    @classmethod
    def load(cls, directory: Path) -> "HybridIndex":
        dense_index = faiss.read_index(str(directory / INDEX_FILE))
        chunks = json.loads((directory / CHUNKS_FILE).read_text(encoding="utf-8"))
        return cls(chunks, dense_index)

    def search(self, query: str, query_embedding: Sequence[float], top_k: int = 4) -> List[Tuple[str, float]]:
        """Perform hybrid search combining dense and sparse retrieval."""
        dense_results = self._dense_search(query_embedding, top_k)
        sparse_results = self._sparse_search(query, top_k)
        return self._combine_results(dense_results, sparse_results, top_k)

    def _dense_search(self, query_embedding: Sequence[float], top_k: int) -> dict:
        q_emb = np.array([query_embedding], dtype='float32')
        scores, indices = self.dense_index.search(q_emb, top_k)

        # FAISS pads with -1 when top_k exceeds the number of vectors
        return {
            int(indices[0][i]): 1.0 / (1.0 + float(scores[0][i]))
            for i in range(len(indices[0]))
            if indices[0][i] >= 0
        }

    def _sparse_search(self, query: str, top_k: int) -> dict:
        tokens = query.lower().split()
        if not tokens:
            return {}
        scores = self.bm25_index.get_scores(tokens)
        top_indices = np.argsort(scores)[-top_k:][::-1]

        return {
            int(i): float(scores[i])
            for i in top_indices
            if scores[i] > 0
        }

    def _combine_results(self, dense: dict, sparse: dict, top_k: int) -> List[Tuple[str, float]]:
        all_indices = set(dense.keys()) | set(sparse.keys())

        combined = [
            (self.chunks[i], dense.get(i, 0.0) + sparse.get(i, 0.0))
            for i in all_indices
        ]

        combined.sort(key=lambda x: x[1], reverse=True)
        return combined[:top_k]
