"""llm client using claude-agent-sdk.

uses the same auth as claude code, so no api key is needed.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from claude_agent_sdk import (
    ClaudeAgentOptions,
    ClaudeSDKClient,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class ClientProtocol(Protocol):
    """protocol for llm clients (real or mock)."""

    async def complete(self, prompt: str) -> str:
        """send prompt and return response."""
        ...


class MockClient:
    """mock client for running without api calls."""

    def __init__(self, responses: Optional[dict[str, str]] = None, delay: float = 0.5):
        """init with optional response mapping.

        responses: dict mapping prompt substrings to responses.
        if prompt contains key (case-insensitive), return value.
        delay: simulated API delay in seconds.
        """
        self.responses = responses or {}
        self.calls: list[str] = []  # track all prompts sent
        self.delay = delay
        self.default_response = (
            "Interesting. What makes you think that cause came before the outcome, "
            "and what evidence would convince you otherwise?"
        )

    async def __aenter__(self) -> MockClient:
        return self

    async def __aexit__(self, *args) -> None:
        pass

    async def complete(self, prompt: str) -> str:
        """return mock response based on prompt."""
        self.calls.append(prompt)

        # simulate API delay
        await asyncio.sleep(self.delay)

        prompt_lower = prompt.lower()
        for key, response in self.responses.items():
            if key.lower() in prompt_lower:
                return response

        return self.default_response


class ClaudeClient:
    """async client for claude using claude-agent-sdk.

    creates a fresh connection per query to avoid state conflicts.
    """

    def __init__(self, cwd: Optional[Path] = None, model: str = "sonnet"):
        self.cwd = cwd or Path.cwd()
        self.model = model

    async def __aenter__(self) -> ClaudeClient:
        return self

    async def __aexit__(self, *args) -> None:
        pass

    async def complete(self, prompt: str) -> str:
        """send a prompt and collect the full text response."""
        # clear API key so the SDK uses subscription auth, not API credits
        os.environ.pop("ANTHROPIC_API_KEY", None)

        # no tools - pure text generation
        options = ClaudeAgentOptions(
            cwd=str(self.cwd),
            model=self.model,
            tools=[],
            allowed_tools=[],
        )
        client: Optional[ClaudeSDKClient] = None

        try:
            client = ClaudeSDKClient(options)
            await client.connect()
            await client.query(prompt)

            text_parts: list[str] = []
            async for event in client.receive_response():
                # assistant messages carry a list of content blocks
                if hasattr(event, "message") and hasattr(event.message, "content"):
                    for block in event.message.content:
                        if hasattr(block, "text"):
                            text_parts.append(block.text)
                elif hasattr(event, "content") and isinstance(event.content, list):
                    for block in event.content:
                        if hasattr(block, "text"):
                            text_parts.append(block.text)
                        elif isinstance(block, dict) and "text" in block:
                            text_parts.append(block["text"])

            logger.debug("collected %d text parts", len(text_parts))
            return "\n".join(text_parts) if text_parts else "(no response)"

        except Exception as e:
            raise RuntimeError(f"claude api error: {e}") from e

        finally:
            if client:
                try:
                    await client.disconnect()
                except Exception:
                    logger.debug("ignoring disconnect error", exc_info=True)
