import asyncio
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings as default_settings
from core.exceptions import RAGError
from core.logger import configure_logging
from models.rag_model import HealthResponse
from rag_services.cache import run_periodic_sweep
from rag_services.container import RAGServices, build_services

logger = logging.getLogger(__name__)


async def rag_error_handler(request: Request, exc: RAGError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def create_app(services: Optional[RAGServices] = None) -> FastAPI:
    services = services or build_services(default_settings)
    settings = services.settings

    application = FastAPI(
        title=settings.app_name,
        description="Upload a PDF and ask questions about it",
        version="1.0.0",
    )
    application.state.services = services

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(RAGError, rag_error_handler)
    application.add_exception_handler(RequestValidationError, request_validation_handler)

    @application.on_event("startup")
    async def startup_event():
        Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
        Path(settings.VECTOR_STORE_DIR).mkdir(parents=True, exist_ok=True)
        application.state.cache_sweeper = asyncio.create_task(
            run_periodic_sweep(services.cache, settings.CACHE_CHECK_PERIOD_SECONDS)
        )
        logger.info("%s started (%s)", settings.app_name, settings.environment)

    @application.on_event("shutdown")
    async def shutdown_event():
        application.state.cache_sweeper.cancel()
        await services.pipeline.drain()

    # Routers are imported lazily to avoid circular deps during app creation
    from routers.chat import router as chat_router
    from routers.documents import router as documents_router

    application.include_router(documents_router, tags=["documents"])
    application.include_router(chat_router, tags=["chat"])

    @application.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            status="ok",
            sessions=len(services.sessions),
            inFlight=len(services.pipeline.active_tasks()),
            cachedAnswers=len(services.cache),
        )

    return application


configure_logging(default_settings.LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=default_settings.HOST, port=default_settings.PORT)
