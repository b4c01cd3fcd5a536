import logging
from typing import Optional

import httpx

from genoscript.core.config import GenerationSettings
from genoscript.core.errors import GenerationError

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Client for the Gemini ``generateContent`` REST endpoint.

    One instance is created at startup and shared across requests so the
    underlying httpx connection pool is reused. There is no retry: a failed
    call is raised to the caller as ``GenerationError``.
    """

    def __init__(self, settings: GenerationSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.model = settings.model
        self.generate_endpoint = f"{settings.api_url}/models/{settings.model}:generateContent"
        self._client = http_client or httpx.AsyncClient(timeout=settings.timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def generate_text(self, prompt: str) -> str:
        """
        Send ``prompt`` as a single user turn and return the reply text.

        Raises:
            GenerationError: on transport errors, non-2xx responses, or a
                reply without any text.
        """
        logger.info("Sending request to Gemini", extra={"model": self.model, "prompt_length": len(prompt)})

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        headers = {
            "x-goog-api-key": self.settings.api_key,
            "Content-Type": "application/json",
        }

        try:
            response = await self._client.post(self.generate_endpoint, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Gemini returned HTTP {e.response.status_code}: {e.response.text[:500]}")
            raise GenerationError(
                f"Gemini request failed with HTTP {e.response.status_code}: {_error_message(e.response)}",
                cause=e,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Error communicating with Gemini: {str(e)}")
            raise GenerationError(f"Could not reach Gemini: {str(e)}", cause=e) from e
        except ValueError as e:
            logger.error(f"Gemini returned a non-JSON body: {str(e)}")
            raise GenerationError("Gemini returned a malformed response", cause=e) from e

        generated_text = _response_text(data)
        if not generated_text:
            reason = (data.get("promptFeedback") or {}).get("blockReason") if isinstance(data, dict) else None
            logger.error("Gemini response contained no text", extra={"block_reason": reason})
            detail = f" (blocked: {reason})" if reason else ""
            raise GenerationError(f"The AI model returned an empty response{detail}.")

        logger.info("Gemini request successful", extra={"response_length": len(generated_text)})
        return generated_text


def _response_text(data) -> str:
    """Concatenate the text parts of the first candidate."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.text[:200] or response.reason_phrase
