from fastapi import HTTPException, Request, status

from genoscript.services.llm.gemini_client import GeminiClient


def get_generation_client(request: Request) -> GeminiClient:
    """Shared client created by the startup hook."""
    client = getattr(request.app.state, "generation_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Generation backend is not configured.",
        )
    return client
