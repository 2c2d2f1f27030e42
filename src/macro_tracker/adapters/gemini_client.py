"""Google Gemini generateContent REST client."""

from dataclasses import dataclass

import httpx

from macro_tracker.services.estimation import EstimatorClient, InlineImage


@dataclass
class GeminiClient(EstimatorClient):
    """HTTPX-backed client for the Gemini generateContent endpoint."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 30.0

    @classmethod
    def create(cls, base_url: str, timeout_seconds: float = 30.0) -> "GeminiClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def generate(
        self,
        *,
        api_key: str,
        model: str,
        prompt: str,
        image: InlineImage | None = None,
    ) -> str:
        """Send a prompt (and optional inline image) and return the reply text."""
        parts: list[dict[str, object]] = [{"text": prompt}]
        if image is not None:
            parts.append(
                {
                    "inlineData": {
                        "mimeType": image.mime_type,
                        "data": image.to_base64(),
                    }
                }
            )
        response = await self.http_client.post(
            f"{self.base_url}/models/{model}:generateContent",
            params={"key": api_key},
            json={"contents": [{"parts": parts}]},
            timeout=self.timeout_seconds,
        )
        payload = response.json()
        if response.is_error:
            raise RuntimeError(_error_message(payload) or "Gemini API call failed")
        return _extract_text(payload)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _extract_text(payload: dict[str, object]) -> str:
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise RuntimeError("Gemini returned no candidates") from exc
    if not isinstance(text, str):
        raise RuntimeError("Gemini returned a non-text part")
    return text


def _error_message(payload: object) -> str | None:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return None
