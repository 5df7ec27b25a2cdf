"""OpenAI Responses API client for UX analysis."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from ux_pulse.services.analysis import AnalysisClient


@dataclass
class OpenAIAnalysisClient(AnalysisClient):
    """Analysis client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIAnalysisClient":
        """Create an OpenAI analysis client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        prompt: str,
        image_data_urls: list[str],
        schema: dict[str, object],
        temperature: float | None,
        reasoning_effort: str | None,
        store: bool,
    ) -> str:
        """Call OpenAI Responses API with structured outputs."""
        content: list[dict[str, str]] = [{"type": "input_text", "text": prompt}]
        content.extend(
            {"type": "input_image", "image_url": image_url}
            for image_url in image_data_urls
        )
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "ux_analysis_report",
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if temperature is not None:
            request_payload["temperature"] = temperature
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        return response.output_text

    async def close(self) -> None:
        await self.client.close()
