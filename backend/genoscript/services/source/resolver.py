"""
Input Source Resolver.

Turns the user's local-file / public-dataset choice into the file name the
generated script works on, plus the shell block the script must run first
to make that file available. Nothing here touches the network; the blocks
describe what the *generated* script does.
"""

from dataclasses import dataclass
import re
import shlex
from typing import Optional, Tuple
from urllib.parse import urlparse
import posixpath

from genoscript.schemas.conversion import LocalSource, PublicSource

_COMPRESSION_SUFFIXES = (".gz", ".bgz", ".bz2", ".zip")

# Output names are built from the base name, so keep it free of shell metacharacters
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._+-]")


@dataclass(frozen=True)
class ResolvedSource:
    kind: str
    file_name: str
    base_name: str
    instructions: str
    download_url: Optional[str] = None
    required_tools: Tuple[str, ...] = ()


def base_name_of(file_name: str) -> str:
    """
    Strip compression and format extensions from a file name and replace
    characters that are unsafe in shell words with "_".

    >>> base_name_of("sample.vcf")
    'sample'
    >>> base_name_of("HG001_GRCh38_benchmark.vcf.gz")
    'HG001_GRCh38_benchmark'
    """
    name = posixpath.basename(file_name.replace("\\", "/"))
    lowered = name.lower()
    for suffix in _COMPRESSION_SUFFIXES:
        if lowered.endswith(suffix):
            name = name[: -len(suffix)]
            break
    stem, dot, _ = name.rpartition(".")
    base = stem if dot and stem else name
    return _UNSAFE_NAME_CHARS.sub("_", base)


def file_name_from_url(url: str) -> str:
    return posixpath.basename(urlparse(url).path)


def _local_instructions(file_name: str) -> str:
    return (
        f"INPUT_FILE={shlex.quote(file_name)}\n"
        'if [ ! -f "$INPUT_FILE" ]; then\n'
        '    echo "Error: input file \'$INPUT_FILE\' not found in $(pwd)." >&2\n'
        '    echo "Place the file next to this script and run it again." >&2\n'
        "    exit 1\n"
        "fi"
    )


def _public_instructions(file_name: str, url: str) -> str:
    return (
        f"VCF_URL={shlex.quote(url)}\n"
        f"INPUT_FILE={shlex.quote(file_name)}\n"
        'if [ -f "$INPUT_FILE" ]; then\n'
        '    echo "Found $INPUT_FILE, skipping download."\n'
        "else\n"
        '    echo "Downloading $INPUT_FILE ..."\n'
        '    if ! wget -q -O "$INPUT_FILE" "$VCF_URL"; then\n'
        '        rm -f "$INPUT_FILE"\n'
        '        echo "Error: failed to download $VCF_URL" >&2\n'
        "        exit 1\n"
        "    fi\n"
        "fi\n"
        'if [ ! -f "$INPUT_FILE.tbi" ]; then\n'
        '    if ! wget -q -O "$INPUT_FILE.tbi" "$VCF_URL.tbi"; then\n'
        '        rm -f "$INPUT_FILE.tbi"\n'
        '        echo "Warning: could not download index $VCF_URL.tbi; continuing without it." >&2\n'
        "    fi\n"
        "fi"
    )


def resolve_input_source(source) -> ResolvedSource:
    """
    Resolve a ``LocalSource`` or ``PublicSource`` into a ``ResolvedSource``.

    A source with nothing selected yet resolves to an empty file name so a
    complete prompt can still be rendered; callers block submission in that
    state.
    """
    if isinstance(source, LocalSource):
        file_name = source.file.name if source.file is not None else ""
        return ResolvedSource(
            kind="local",
            file_name=file_name,
            base_name=base_name_of(file_name),
            instructions=_local_instructions(file_name),
        )

    if isinstance(source, PublicSource):
        url = source.dataset.url if source.dataset is not None else ""
        file_name = file_name_from_url(url)
        return ResolvedSource(
            kind="public",
            file_name=file_name,
            base_name=base_name_of(file_name),
            instructions=_public_instructions(file_name, url),
            download_url=url,
            required_tools=("wget",),
        )

    raise TypeError(f"Unsupported input source: {type(source).__name__}")
