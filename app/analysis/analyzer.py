"""Structured-extraction client: one call to the content-understanding service."""

import base64
from dataclasses import dataclass

from app.analysis.client_base import BaseAnalysisClient, ContentPart
from app.extraction.models import PDF_MEDIA_TYPE, ExtractionResult
from app.logging.logger import Log

_SCANNED_PDF_HINT = (
    "This is a scanned PDF document. Analyze the visual content to extract "
    "the structured information."
)
_IMAGE_HINT = "Analyze this document image and extract the structured information."


@dataclass(frozen=True)
class Instruction:
    """A fixed instruction template and how extracted text is presented with it."""

    name: str
    system_prompt: str
    page_breaks: bool = False


class StructuredExtractionClient:
    """Sends extracted text, or the raw visual content, with an instruction."""

    def __init__(
        self,
        *,
        client: BaseAnalysisClient,
        model: str,
        temperature: float = 0.0,
        json_mode: bool = True,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        if self._temperature != temperature:
            Log.warning(
                f"Temperature {temperature} is outside 0.0-0.2, using {self._temperature}"
            )
        self._json_mode = json_mode

    async def analyze(self, extraction: ExtractionResult, instruction: Instruction) -> str:
        """Return the raw reply text; no parsing, no retry.

        Raises:
            UpstreamUnavailableError: if the service call fails.
        """
        user_content = self._build_user_content(extraction, instruction)
        Log.debug(f"Analysis instruction '{instruction.name}':\n{instruction.system_prompt}")
        raw = await self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=instruction.system_prompt,
            user_content=user_content,
            json_mode=self._json_mode,
        )
        Log.info(
            "Analysis service replied",
            instruction=instruction.name,
            mode=extraction.mode.value,
            chars=len(raw),
        )
        Log.debug(f"Analysis raw response:\n{raw}")
        return raw

    def _build_user_content(
        self, extraction: ExtractionResult, instruction: Instruction
    ) -> str | list[ContentPart]:
        if extraction.is_visual:
            return self._visual_parts(extraction)
        if instruction.page_breaks:
            return (
                f"Total pages in PDF: {extraction.page_count}\n\n"
                f"Extracted text with page breaks:\n{extraction.text_with_page_breaks()}"
            )
        return extraction.text

    @staticmethod
    def _visual_parts(extraction: ExtractionResult) -> list[ContentPart]:
        encoded = base64.b64encode(extraction.content).decode("ascii")
        data_url = f"data:{extraction.media_type};base64,{encoded}"
        if extraction.media_type == PDF_MEDIA_TYPE:
            return [
                {"type": "text", "text": _SCANNED_PDF_HINT},
                {
                    "type": "file",
                    "file": {"filename": "document.pdf", "file_data": data_url},
                },
            ]
        return [
            {"type": "text", "text": _IMAGE_HINT},
            {"type": "image_url", "image_url": {"url": data_url}},
        ]
