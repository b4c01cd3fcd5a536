from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from genoscript.core import logging as _logging  # Initialize logging
from genoscript.core.config import load_settings
from genoscript.core.errors import ConfigurationError, EmptySelectionError, GenerationError
from genoscript.schemas.conversion import PublicSource, ScriptRequest
from genoscript.services.llm.gemini_client import GeminiClient
from genoscript.services.pipeline.script_pipeline import (
    build_request_prompt,
    ensure_output_selection,
    ensure_source_selected,
    run_script_pipeline,
)
from genoscript.services.source.catalog import resolve_dataset_selection

USAGE = "Usage: python -m genoscript <request.json> [--prompt-only] [--output PATH]"


async def _generate(request: ScriptRequest) -> str:
    client = GeminiClient(load_settings())
    try:
        result = await run_script_pipeline(request, client)
    finally:
        await client.aclose()
    return result.script


def main(argv: list[str]) -> int:
    if len(argv) < 2 or "--help" in argv:
        print(USAGE)
        return 0

    path = Path(argv[1])
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        return 2

    output = None
    if "--output" in argv:
        try:
            output = Path(argv[argv.index("--output") + 1])
        except IndexError:
            print("Error: --output requires a path argument", file=sys.stderr)
            return 2

    try:
        request = ScriptRequest.model_validate(json.loads(path.read_text(encoding="utf-8")))
        ensure_output_selection(request)
        if isinstance(request.source, PublicSource):
            request = request.model_copy(update={"source": resolve_dataset_selection(request.source)})
        ensure_source_selected(request)
    except (ValidationError, EmptySelectionError, ValueError) as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return 2

    if "--prompt-only" in argv:
        text = build_request_prompt(request)
    else:
        try:
            text = asyncio.run(_generate(request))
        except (ConfigurationError, GenerationError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    if output is not None:
        output.write_text(text + "\n", encoding="utf-8")
        if "--prompt-only" not in argv:
            output.chmod(0o755)
        print(f"Wrote {output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
