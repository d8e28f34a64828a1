"""
Terminal chat client: model session, conversation state and REPL.
"""

from .chat_client import ChatClient
from .config import ChatConfig
from .stream_driver import RenderSnapshot, StreamDriver

__all__ = ['ChatClient', 'ChatConfig', 'RenderSnapshot', 'StreamDriver']
