"""
Script Pipeline: orchestrates request → prompt → LLM → script.

Runs one generation cycle: resolve the input source, build the prompt,
call the generation backend once and extract the script from its reply.
"""
import logging
import time
from typing import Protocol

from genoscript.core.errors import EmptySelectionError
from genoscript.schemas.conversion import LocalSource, PublicSource, ScriptRequest, ScriptResponse
from genoscript.services.llm.prompt_builder import build_prompt, render_prompt, selected_output_types
from genoscript.services.llm.response_extractor import extract_script
from genoscript.services.source.resolver import resolve_input_source

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    model: str

    async def generate_text(self, prompt: str) -> str:
        ...


def ensure_output_selection(request: ScriptRequest) -> None:
    """Caller-side guard: the pipeline is never run without an output type."""
    if not request.output_types:
        raise EmptySelectionError()


def ensure_source_selected(request: ScriptRequest) -> None:
    """Caller-side guard: a file or dataset must be chosen before submitting."""
    source = request.source
    if isinstance(source, LocalSource) and source.file is None:
        raise ValueError("No input file selected. Upload a file first.")
    if isinstance(source, PublicSource) and source.dataset is None:
        raise ValueError("No public dataset selected.")


def build_request_prompt(request: ScriptRequest) -> str:
    return build_prompt(request.source, request.input_type, request.output_types, request.options)


def suggested_filename(base_name: str) -> str:
    return f"convert_{base_name}.sh" if base_name else "convert.sh"


def run_instructions(filename: str) -> str:
    return (
        f"Save this script to a file (e.g., {filename}), make it executable with "
        f"chmod +x {filename}, and run it in your terminal with ./{filename}. "
        "Make sure the required tools listed at the top of the script are installed."
    )


async def run_script_pipeline(request: ScriptRequest, generator: TextGenerator) -> ScriptResponse:
    """
    Full pipeline: source → prompt → generation → extraction → response.

    Errors from the generator (``GenerationError``) propagate unchanged.
    """
    start_time = time.time()
    outputs = selected_output_types(request.output_types)
    logger.info(
        "Starting script pipeline",
        extra={"source": request.source.type, "output_types": [t.value for t in outputs]},
    )

    resolved = resolve_input_source(request.source)
    prompt = render_prompt(resolved, request.input_type, request.output_types, request.options)
    logger.info("Prompt built", extra={"prompt_length": len(prompt)})

    raw_text = await generator.generate_text(prompt)
    script = extract_script(raw_text)

    filename = suggested_filename(resolved.base_name)
    logger.info(
        "Script pipeline finished in %.2fs", time.time() - start_time,
        extra={"script_length": len(script)},
    )
    return ScriptResponse(
        script=script,
        model=generator.model,
        output_types=outputs,
        suggested_filename=filename,
        run_instructions=run_instructions(filename),
    )
