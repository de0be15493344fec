"""Google Gemini completion provider."""

import asyncio
import logging

from google import genai
from google.genai import errors, types
from pydantic import BaseModel

from legal_assistant.core.config import settings
from legal_assistant.core.errors import CompletionServiceError
from legal_assistant.services.llm.base import BaseLLMProvider, LLMResponse

logger = logging.getLogger(__name__)


class GeminiProvider(BaseLLMProvider):
    def __init__(self, api_key: str, model: str | None = None, timeout: float | None = None):
        self.client = genai.Client(api_key=api_key)
        self.model = model or settings.gemini_model
        self.timeout = timeout or settings.completion_timeout

    def _build_config(
        self, system_instruction: str | None, output_schema: type[BaseModel] | None
    ) -> types.GenerateContentConfig:
        if output_schema is not None:
            return types.GenerateContentConfig(
                system_instruction=system_instruction,
                response_mime_type="application/json",
                response_schema=output_schema,
            )
        return types.GenerateContentConfig(system_instruction=system_instruction)

    async def complete(
        self,
        content: str,
        system_instruction: str | None = None,
        output_schema: type[BaseModel] | None = None,
    ) -> LLMResponse:
        config = self._build_config(system_instruction, output_schema)
        logger.info(
            f"=== Gemini call ===\n"
            f"  Model: {self.model}\n"
            f"  Structured: {output_schema.__name__ if output_schema else 'no'}\n"
            f"  Content: {content[:200]}"
        )

        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model,
                    contents=content,
                    config=config,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Gemini call timed out after {self.timeout}s")
            raise CompletionServiceError(
                "The AI model took too long to respond. Please try again."
            ) from e
        except errors.APIError as e:
            logger.error(f"Gemini API error: {e}")
            raise CompletionServiceError(f"Failed to communicate with the AI model: {e.message or e}") from e

        usage = response.usage_metadata
        if usage:
            logger.debug(
                f"  Prompt tokens: {usage.prompt_token_count}, "
                f"response tokens: {usage.candidates_token_count}"
            )

        if not response.text:
            raise CompletionServiceError("The AI model returned an empty response.")
        return LLMResponse(text=response.text)
