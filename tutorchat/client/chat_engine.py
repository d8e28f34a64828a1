"""
Core chat functionality: one tutoring turn from user message to rendered answer.

Flow of a turn:
    send()
      ↓ add the user message to history
      ↓ create the model session if there is none (seeded from history)
      ↓ stream the reply through the StreamDriver, shown live
      ↓ add the model reply to history

A missing API key ends the turn with a configuration notice. A failed
stream keeps whatever text already arrived, adds an error notice and
drops the session, so the next turn rebuilds it from history.
"""

import logging
from typing import Callable, Optional, Sequence

from ..errors import ConfigurationError, TransportError
from .attachments import Attachment
from .config import ChatConfig
from .history_manager import HistoryManager, Message, Role
from .model_session import ModelSession, create_session
from .prompts import CONFIGURATION_ERROR_MESSAGE, TRANSPORT_ERROR_MESSAGE
from .response_handler import ResponseHandler
from .stream_driver import StreamDriver

logger = logging.getLogger(__name__)

SessionFactory = Callable[[ChatConfig, Sequence[Message]], ModelSession]


class ChatEngine:
    """Runs conversation turns against the model session."""

    def __init__(self, config: ChatConfig, response_handler: ResponseHandler,
                 history_manager: HistoryManager,
                 session_factory: SessionFactory = create_session):
        self.config = config
        self.response_handler = response_handler
        self.history_manager = history_manager
        self.session_factory = session_factory
        self.session: Optional[ModelSession] = None
        self.driver = StreamDriver(on_update=response_handler.publish,
                                   separator_policy=config.separator_policy)

    async def send(self, text: str, attachment: Optional[Attachment] = None) -> Optional[Message]:
        """Run one turn.

        Returns:
            The message that ended the turn: the model reply, an error
            notice, or None if the turn was superseded by a new conversation
        """
        seed = self.history_manager.seed_history()
        self.history_manager.add_message(Message(Role.USER, text, attachment))

        if self.session is None:
            try:
                self.session = self.session_factory(self.config, seed)
            except ConfigurationError as e:
                logger.warning(f"Model session not created: {e}")
                return self._add_error(
                    CONFIGURATION_ERROR_MESSAGE.format(env_name=self.config.api_key_envs[0])
                )

        session = self.session
        generation = self.driver.reset()
        try:
            with self.response_handler.live_display():
                reply = await self.driver.consume(
                    session.send_message_stream(text, attachment), generation
                )
        except TransportError as e:
            logger.error(f"Response stream failed: {e}")
            if not self.driver.is_current(generation):
                return None
            partial = self.driver.buffer.text
            if partial:
                self.history_manager.add_message(Message(Role.MODEL, partial))
            if self.session is session:
                self.session = None
            return self._add_error(TRANSPORT_ERROR_MESSAGE)

        if not self.driver.is_current(generation):
            logger.debug(f"Turn {generation} superseded, reply dropped")
            return None

        message = Message(Role.MODEL, reply)
        self.history_manager.add_message(message)
        return message

    def new_conversation(self) -> None:
        """Forget the conversation; a running turn stops publishing."""
        self.driver.cancel()
        self.session = None
        self.history_manager.clear_history()

    def _add_error(self, text: str) -> Message:
        message = Message(Role.MODEL, text, is_error=True)
        self.history_manager.add_message(message)
        self.response_handler.display_message(text, is_error=True)
        return message
