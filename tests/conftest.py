"""
Shared fixtures for the test suite.

The embedding, generation and PDF capabilities are replaced with the fakes
in tests/fakes.py; FAISS and BM25 run for real against tmp_path.
"""
import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from rag_services.container import build_services
from tests.fakes import FakeEmbeddingService, FakeLLMService, FakePDFProcessor, write_pdf


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        VECTOR_STORE_DIR=str(tmp_path / "vector_store"),
        CHUNK_SIZE=120,
        CHUNK_OVERLAP=20,
        TOP_K_RESULTS=3,
        MAX_FILE_SIZE_MB=1,
    )


@pytest.fixture
def embedder():
    return FakeEmbeddingService()


@pytest.fixture
def llm():
    return FakeLLMService()


@pytest.fixture
def pdf_processor():
    return FakePDFProcessor()


@pytest.fixture
def services(test_settings, embedder, llm, pdf_processor):
    return build_services(
        test_settings,
        embedding_service=embedder,
        llm_service=llm,
        pdf_processor=pdf_processor,
    )


@pytest.fixture
def client(services):
    from main import create_app

    with TestClient(create_app(services)) as test_client:
        yield test_client


@pytest.fixture
def document(tmp_path):
    return write_pdf(tmp_path / "report.pdf")
