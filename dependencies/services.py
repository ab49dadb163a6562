from fastapi import Depends, Request

from core.config import Settings
from rag_services.container import RAGServices
from rag_services.ingestion import IngestionPipeline
from rag_services.qa import QAEngine
from rag_services.state import SessionRegistry


def get_services(request: Request) -> RAGServices:
    return request.app.state.services


def get_settings(services: RAGServices = Depends(get_services)) -> Settings:
    return services.settings


def get_session_registry(services: RAGServices = Depends(get_services)) -> SessionRegistry:
    return services.sessions


def get_ingestion_pipeline(services: RAGServices = Depends(get_services)) -> IngestionPipeline:
    return services.pipeline


def get_qa_engine(services: RAGServices = Depends(get_services)) -> QAEngine:
    return services.qa_engine
