from typing import Any

import httpx
import openai

from app.analysis.client_base import BaseAnalysisClient, ContentPart
from app.analysis.exceptions import UpstreamUnavailableError


class OpenAIClientAdapter(BaseAnalysisClient):
    """Analysis client built on the OpenAI-compatible async chat API.

    The async client lets a cancelled request abort the in-flight HTTP call.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_content: str | list[ContentPart],
        json_mode: bool,
    ) -> str:
        request: dict[str, Any] = {
            "model": model,
            "temperature": temperature,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}
        try:
            response = await self._client.chat.completions.create(**request)
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise UpstreamUnavailableError(
                f"Analysis service network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise UpstreamUnavailableError(
                f"Analysis service API error: {exc}"
            ) from exc

        if not response.choices:
            raise UpstreamUnavailableError("Analysis service returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise UpstreamUnavailableError("Analysis service returned an empty response")
        return content
