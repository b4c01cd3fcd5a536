import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from genoscript.api.router import api_router
from genoscript.core import logging as _logging  # Initialize logging
from genoscript.core.config import load_settings
from genoscript.services.llm.gemini_client import GeminiClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Missing credentials stop the server here, before any request is served
    settings = load_settings()
    app.state.settings = settings
    app.state.generation_client = GeminiClient(settings)
    logger.info("Generation client ready", extra={"model": settings.model})
    try:
        yield
    finally:
        await app.state.generation_client.aclose()
        app.state.generation_client = None


app = FastAPI(
    title="GenoScript API",
    description="Generates VCF to FASTQ/BED conversion scripts with a large language model",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "GenoScript"}
