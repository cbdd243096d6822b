from abc import ABC, abstractmethod
from typing import Any

ContentPart = dict[str, Any]


class BaseAnalysisClient(ABC):
    """Contract for provider-specific content-understanding clients."""

    @abstractmethod
    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_content: str | list[ContentPart],
        json_mode: bool,
    ) -> str:
        """Send one system + user exchange and return the reply as plain text.

        ``user_content`` is either plain text or a list of OpenAI-style content
        parts (``text``, ``image_url``, ``file``).

        Raises:
            UpstreamUnavailableError: on network, timeout or provider errors,
                                      or when the reply is empty.
        """
