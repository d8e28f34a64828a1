"""
Model collaborator: a chat session on an OpenAI-compatible endpoint.

A session keeps its own message list so every request carries the full
conversation. It can be seeded with earlier messages, which is how a
fresh session is rebuilt after a failed stream.
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import httpx
import openai
from openai import AsyncOpenAI

from ..errors import ConfigurationError, TransportError
from .attachments import Attachment
from .config import ChatConfig
from .history_manager import Message, Role

logger = logging.getLogger(__name__)

API_ROLES = {Role.USER: "user", Role.MODEL: "assistant"}


def to_api_message(role: Role, text: str, attachment: Optional[Attachment] = None) -> Dict[str, Any]:
    """Build an OpenAI chat message; an attachment becomes an image_url part."""
    if attachment is None:
        return {"role": API_ROLES[role], "content": text}
    return {
        "role": API_ROLES[role],
        "content": [
            {"type": "text", "text": text},
            {"type": "image_url", "image_url": {"url": attachment.data_url}},
        ],
    }


def _preview(content: Any) -> str:
    if not isinstance(content, str):
        content = " ".join(part.get("text", "<image>") for part in content)
    return f"{content[:500]}{'...' if len(content) > 500 else ''}"


class ModelSession:
    """One chat session with the tutoring system prompt."""

    def __init__(self, config: ChatConfig, client: AsyncOpenAI,
                 history: Sequence[Message] = (), system_prompt: Optional[str] = None):
        self.config = config
        self.client = client
        self.system_prompt = system_prompt if system_prompt is not None else config.load_system_prompt()
        self.messages: List[Dict[str, Any]] = [
            to_api_message(msg.role, msg.text, msg.attachment) for msg in history
        ]

    def build_request(self, user_message: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [{"role": "system", "content": self.system_prompt}, *self.messages, user_message]

    async def send_message_stream(self, text: str,
                                  attachment: Optional[Attachment] = None) -> AsyncIterator[str]:
        """Send a user message and yield the reply as text fragments.

        The exchange is added to the session only once the stream completes.

        Raises:
            TransportError: If the request or the stream fails
        """
        user_message = to_api_message(Role.USER, text, attachment)
        messages = self.build_request(user_message)

        logger.debug("=== CHAT PROMPT ===")
        logger.debug(f"Model: {self.config.model}, Temperature: {self.config.temperature}, "
                     f"Max tokens: {self.config.max_tokens}")
        for msg in messages[1:]:
            logger.debug(f"{msg['role'].upper()}: {_preview(msg['content'])}")

        try:
            stream = await self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                stream=True,
            )
        except (openai.OpenAIError, httpx.HTTPError) as e:
            raise TransportError(f"Could not start the response stream: {e}") from e

        parts: List[str] = []
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    parts.append(delta)
                    yield delta
        except (openai.OpenAIError, httpx.HTTPError) as e:
            raise TransportError(f"Response stream failed: {e}") from e
        finally:
            await stream.close()

        reply = "".join(parts)
        logger.debug("=== CHAT STREAMING RESPONSE ===")
        logger.debug(f"Response: {_preview(reply)}")

        self.messages.append(user_message)
        self.messages.append(to_api_message(Role.MODEL, reply))


def create_session(config: ChatConfig, history: Sequence[Message] = ()) -> ModelSession:
    """Create a session seeded with earlier messages.

    Raises:
        ConfigurationError: If no API key is set in the environment
    """
    api_key = config.resolve_api_key()
    if not api_key:
        raise ConfigurationError(
            f"API key not found; set the {' or '.join(config.api_key_envs)} environment variable"
        )
    client = AsyncOpenAI(base_url=config.base_url, api_key=api_key, timeout=config.timeout)
    return ModelSession(config, client, history)
