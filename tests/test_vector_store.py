import asyncio

import pytest

from core.exceptions import IndexNotFoundError
from rag_services.retrieval import HybridIndex
from rag_services.vector_store import VectorIndexStore
from tests.fakes import FakeEmbeddingService

CHUNKS = [
    "solar panel revenue grew twelve percent",
    "the warehouse opened on schedule",
    "golden eagles nest on cliff ledges",
]


@pytest.fixture
def store(tmp_path, embedder):
    return VectorIndexStore(tmp_path / "vector_store", embedder)


class TestVectorIndexStore:
    def test_key_is_stable_per_document(self, tmp_path):
        a = VectorIndexStore.key_for(str(tmp_path / "a.pdf"))
        assert a == VectorIndexStore.key_for(str(tmp_path / "a.pdf"))
        assert a != VectorIndexStore.key_for(str(tmp_path / "b.pdf"))

    @pytest.mark.asyncio
    async def test_missing_index_without_chunks_raises(self, store):
        with pytest.raises(IndexNotFoundError):
            await store.load_or_build("unknown")
        assert not store.exists("unknown")

    @pytest.mark.asyncio
    async def test_builds_and_persists_when_absent(self, store, embedder):
        index = await store.load_or_build("doc", CHUNKS)

        assert index.chunks == CHUNKS
        assert HybridIndex.exists(store.index_dir("doc"))
        assert embedder.calls == [CHUNKS]

    @pytest.mark.asyncio
    async def test_existing_index_ignores_chunks(self, store, embedder):
        first = await store.load_or_build("doc", CHUNKS)
        second = await store.load_or_build("doc", ["something else entirely"])

        assert second is first
        assert len(embedder.calls) == 1

    @pytest.mark.asyncio
    async def test_loads_persisted_index_in_new_store(self, tmp_path, store):
        await store.load_or_build("doc", CHUNKS)

        fresh_embedder = FakeEmbeddingService()
        reopened = VectorIndexStore(tmp_path / "vector_store", fresh_embedder)
        index = await reopened.load_or_build("doc")

        assert index.chunks == CHUNKS
        assert fresh_embedder.calls == []

    @pytest.mark.asyncio
    async def test_concurrent_builds_for_same_key_are_serialised(self, store, embedder):
        results = await asyncio.gather(
            store.load_or_build("doc", CHUNKS),
            store.load_or_build("doc", ["another upload racing the first"]),
            store.load_or_build("doc", CHUNKS),
        )

        assert results[0] is results[1] is results[2]
        assert embedder.calls == [CHUNKS]

    @pytest.mark.asyncio
    async def test_rebuild_replaces_index(self, store, embedder):
        await store.load_or_build("doc", CHUNKS)
        rebuilt = await store.rebuild("doc", ["only chunk now"])

        assert rebuilt.chunks == ["only chunk now"]
        assert (await store.load_or_build("doc")) is rebuilt
        assert len(embedder.calls) == 2

    @pytest.mark.asyncio
    async def test_query_returns_best_first(self, store):
        index = await store.load_or_build("doc", CHUNKS)

        # The fake embeds identical text to identical vectors, so an exact
        # chunk is its own nearest neighbour
        results = await store.query(index, CHUNKS[2], k=2)

        assert len(results) == 2
        assert results[0][0] == CHUNKS[2]
        assert results[0][1] >= results[1][1]

    @pytest.mark.asyncio
    async def test_query_with_k_larger_than_index(self, store):
        index = await store.load_or_build("doc", CHUNKS)
        results = await store.query(index, "warehouse", k=10)

        assert len(results) == len(CHUNKS)
        assert {text for text, _ in results} == set(CHUNKS)
