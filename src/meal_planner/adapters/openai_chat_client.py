"""OpenAI-compatible chat completion client for plan generation."""

from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI

from meal_planner.services.planning import ChatClient


@dataclass
class OpenAIChatClient(ChatClient):
    """Chat client backed by an OpenAI-compatible Chat Completions API."""

    client: AsyncOpenAI

    @classmethod
    def create(
        cls,
        api_key: str,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 60.0,
    ) -> "OpenAIChatClient":
        """Create a chat client for the given API endpoint."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                http_client=http_client or httpx.AsyncClient(timeout=timeout_seconds),
                max_retries=0,
            )
        )

    async def complete(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Send system and user instructions and return the reply text."""
        response = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise RuntimeError("Chat completion returned an empty response")
        return content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
