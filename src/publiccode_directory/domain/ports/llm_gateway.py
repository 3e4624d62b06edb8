"""Port: text-generation gateway used for README summaries."""

from __future__ import annotations

from typing import Protocol


class LlmGateway(Protocol):
    """Abstract contract for a chat-style text generator."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the generated text for a system + user prompt pair."""
        ...
