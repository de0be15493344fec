"""Abstract completion provider interface. All providers must implement this."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from pydantic import BaseModel


@dataclass
class CompletionRequest:
    content: str
    system_instruction: str | None = None
    # Response model the output must conform to; None means free text
    output_schema: type[BaseModel] | None = None


@dataclass
class LLMResponse:
    text: str


class BaseLLMProvider(ABC):
    @abstractmethod
    async def complete(
        self,
        content: str,
        system_instruction: str | None = None,
        output_schema: type[BaseModel] | None = None,
    ) -> LLMResponse:
        """Send a single request and get the full response text.

        With output_schema set the provider must constrain generation to JSON matching it.
        Raises CompletionServiceError on failure.
        """
        ...

    async def run(self, request: CompletionRequest) -> LLMResponse:
        return await self.complete(
            request.content,
            system_instruction=request.system_instruction,
            output_schema=request.output_schema,
        )
