"""
Terminal tutoring chat for Grade 8 mathematics.

Streams answers from an OpenAI-compatible model endpoint and renders them
as styled pedagogical sections (knowledge, hints, solution, summary...).
"""

__version__ = "0.1.0"
