"""OpenAI Responses API client for nutrition estimates."""

from dataclasses import dataclass, field

from openai import AsyncOpenAI

from macro_tracker.services.estimation import EstimatorClient, InlineImage


@dataclass
class OpenAIEstimatorClient(EstimatorClient):
    """Estimator client backed by the OpenAI Responses API.

    The API key belongs to the user's settings rather than the process
    configuration, so one SDK client is kept per key.
    """

    timeout_seconds: float = 30.0
    clients: dict[str, AsyncOpenAI] = field(default_factory=dict)

    def _client_for(self, api_key: str) -> AsyncOpenAI:
        client = self.clients.get(api_key)
        if client is None:
            client = AsyncOpenAI(api_key=api_key, timeout=self.timeout_seconds)
            self.clients[api_key] = client
        return client

    async def generate(
        self,
        *,
        api_key: str,
        model: str,
        prompt: str,
        image: InlineImage | None = None,
    ) -> str:
        """Call the Responses API and return its output text."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if image is not None:
            content.append({"type": "input_image", "image_url": image.to_data_url()})
        response = await self._client_for(api_key).responses.create(
            model=model,
            input=[{"role": "user", "content": content}],
            store=False,
        )
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close every SDK client that was opened."""
        for client in self.clients.values():
            await client.close()
        self.clients.clear()
