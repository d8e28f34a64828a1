"""
Exception types shared by the client and the renderer.
"""


class TutorChatError(Exception):
    """Base class for all tutorchat errors."""


class ConfigurationError(TutorChatError):
    """A required credential or endpoint setting for the model is missing."""


class TransportError(TutorChatError):
    """The model's fragment stream failed before completing."""


class MathRenderError(TutorChatError):
    """An inline formula could not be parsed; it is shown as literal text."""
