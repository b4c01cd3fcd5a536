"""
Response Extractor.

Pulls the script out of a free-form model reply. The reply format is not
guaranteed, so this never raises: when no fenced block is found the whole
reply is returned with stray fence markers removed.
"""

import logging
import re

logger = logging.getLogger(__name__)

_LANGUAGE_TAG = r"(?:bash|shell|sh|zsh|r)\b"

# First fenced block, language tag optional and case-insensitive
_FENCED_BLOCK = re.compile(r"```[ \t]*(?:" + _LANGUAGE_TAG + r")?[ \t]*\r?\n?(.*?)```", re.IGNORECASE | re.DOTALL)

_LEADING_FENCE = re.compile(r"^```[ \t]*(?:" + _LANGUAGE_TAG + r")?[ \t]*\r?\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\r?\n?```[ \t]*$")
_LEADING_TAG_LINE = re.compile(r"^" + _LANGUAGE_TAG + r"[ \t]*\r?\n", re.IGNORECASE)


def strip_fence_markers(text: str) -> str:
    """
    Remove an unmatched opening/closing fence. A language tag left on its own
    line is dropped only when an opening fence was removed; text without any
    fence comes back trimmed but otherwise unchanged.
    """
    cleaned = text.strip()
    cleaned, opened = _LEADING_FENCE.subn("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    if opened:
        cleaned = _LEADING_TAG_LINE.sub("", cleaned.lstrip(), count=1)
    return cleaned.strip()


def extract_script(raw_text: str) -> str:
    """
    Return the script embedded in ``raw_text``.

    Args:
        raw_text: The model reply.

    Returns:
        The trimmed interior of the first fenced code block, or the trimmed
        reply without fence remnants when there is no complete block.
    """
    if not raw_text:
        return ""

    match = _FENCED_BLOCK.search(raw_text)
    if match:
        return match.group(1).strip()

    logger.warning("No fenced code block in model response; using the whole reply")
    return strip_fence_markers(raw_text)
