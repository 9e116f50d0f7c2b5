import httpx
import openai

from finance_ingest.ai.client_base import BaseCompletionClient
from finance_ingest.ai.exceptions import AINetworkError, AIServiceError


class OpenAIClientAdapter(BaseCompletionClient):
    """Completion client built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
        schema_name: str,
        timeout: float | None = None,
    ) -> str:
        client = self._client if timeout is None else self._client.with_options(timeout=timeout)
        try:
            response = client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema_name,
                        "strict": True,
                        "schema": json_schema,
                    },
                },
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise AINetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AINetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise AIServiceError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise AIServiceError("AI returned empty response")
        return content
