import logging

from fastapi import APIRouter, Depends, HTTPException, status

from genoscript.api.dependencies import get_generation_client
from genoscript.core.errors import EmptySelectionError, GenerationError
from genoscript.schemas.conversion import PromptResponse, PublicSource, ScriptRequest, ScriptResponse
from genoscript.services.llm.gemini_client import GeminiClient
from genoscript.services.pipeline.script_pipeline import (
    build_request_prompt,
    ensure_output_selection,
    ensure_source_selected,
    run_script_pipeline,
)
from genoscript.services.source.catalog import resolve_dataset_selection

router = APIRouter()
logger = logging.getLogger(__name__)


def _validated_request(request: ScriptRequest) -> ScriptRequest:
    """Apply the submission guards the UI would enforce before calling the pipeline."""
    try:
        ensure_output_selection(request)
        if isinstance(request.source, PublicSource):
            request = request.model_copy(update={"source": resolve_dataset_selection(request.source)})
        ensure_source_selected(request)
    except EmptySelectionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ValueError as ve:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(ve))
    return request


@router.post(
    "/prompt",
    response_model=PromptResponse,
    summary="Preview the generation prompt",
    description="Build the prompt that would be sent to the model, without calling it.",
)
async def preview_prompt(request: ScriptRequest) -> PromptResponse:
    request = _validated_request(request)
    return PromptResponse(prompt=build_request_prompt(request), output_types=request.output_types)


@router.post(
    "/generate",
    response_model=ScriptResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate a conversion script",
    description="Build the prompt, call the model and return the extracted shell script.",
)
async def generate_script(
    request: ScriptRequest,
    client: GeminiClient = Depends(get_generation_client),
) -> ScriptResponse:
    """
    Endpoint to trigger the script generation pipeline.

    - **source**: local file descriptor or public dataset
    - **output_types**: at least one of fastq, bed
    - **options**: FASTQ and BED parameters
    """
    request = _validated_request(request)
    try:
        return await run_script_pipeline(request, client)
    except GenerationError as e:
        logger.error(f"Script generation failed: {str(e)}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
