"""FastAPI application entry point."""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from pydantic_settings import BaseSettings
from starlette.responses import Response

from app.api.routes import metrics, plagiarism
from app.models.similarity import SimilarityConfig
from app.services.document_processor import DocumentProcessor
from app.utils.logger import logger
from app.utils.tracer import initialize_tracing, shutdown_tracing


class Settings(BaseSettings):
    """Application settings."""

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # Upload limits
    upload_dir: str = "./uploads"  # Temporary storage for files being extracted
    max_files: int = 5  # Maximum documents per batch
    max_file_size_mb: int = 20  # Maximum size of each file in MB

    # Similarity configuration
    vector_threshold: float = 0.2  # Minimum cosine score to report a pair
    chunk_threshold: float = 0.7  # Minimum line similarity to report a matching section
    stopword_language: str = "en"
    extra_stopwords: str = ""  # Comma-separated words added to the stopword set
    detect_overlaps: bool = True  # Report matching lines for each flagged pair
    global_similarity_signal: str = "vector"  # "vector" or "overlap"

    # Extraction
    extraction_workers: int = 4  # Documents extracted in parallel (1 = sequential)

    # OpenTelemetry tracing configuration
    tracing_enabled: bool = False
    otlp_endpoint: str = ""  # OTLP endpoint URL (empty = use console exporter)

    class Config:
        env_file = os.path.join(os.path.dirname(__file__), "..", "..", ".env")
        env_file_encoding = 'utf-8'
        case_sensitive = False
        extra = "ignore"

    def similarity_config(self) -> SimilarityConfig:
        """Build the comparison configuration from these settings."""
        return SimilarityConfig(
            vector_threshold=self.vector_threshold,
            chunk_threshold=self.chunk_threshold,
            stopword_language=self.stopword_language,
            extra_stopwords=tuple(
                word.strip() for word in self.extra_stopwords.split(",") if word.strip()
            ),
            detect_overlaps=self.detect_overlaps,
            global_signal=self.global_similarity_signal,
        )


# Global services (initialized in lifespan)
document_processor: DocumentProcessor = None
settings: Settings = None
tracer_provider = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global document_processor, settings, tracer_provider

    # Startup
    logger.info("Starting Plagiarism Checker")
    settings = Settings()

    # Fail fast on invalid thresholds or an unknown stopword language
    similarity_config = settings.similarity_config()

    tracer_provider = initialize_tracing(
        service_name="plagiarism-checker",
        service_version="1.0.0",
        otlp_endpoint=settings.otlp_endpoint if settings.otlp_endpoint else None,
        tracing_enabled=settings.tracing_enabled,
    )

    document_processor = DocumentProcessor(upload_dir=settings.upload_dir)

    logger.info(
        f"Services initialized: vector_threshold={similarity_config.vector_threshold}, "
        f"chunk_threshold={similarity_config.chunk_threshold}, "
        f"stopwords={similarity_config.stopword_language}, "
        f"max_files={settings.max_files}, extraction_workers={settings.extraction_workers}"
    )

    yield

    # Shutdown
    logger.info("Shutting down Plagiarism Checker")
    if tracer_provider:
        shutdown_tracing(tracer_provider)
    document_processor = None
    settings = None
    tracer_provider = None


app = FastAPI(
    title="Plagiarism Checker",
    description="Pairwise similarity detection for uploaded documents",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return request validation errors with the structured error kind."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": {
                "error": "InvalidRequest",
                "message": "Request validation failed",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "Plagiarism Checker"}


@app.get("/metrics")
async def prometheus_metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(plagiarism.router, prefix="/api", tags=["plagiarism"])
app.include_router(metrics.router, prefix="/api", tags=["metrics"])


if __name__ == "__main__":
    import uvicorn

    run_settings = Settings()
    uvicorn.run(app, host=run_settings.api_host, port=run_settings.api_port)
