"""
Configuration management for the tutoring chat client.

Settings come from three places, later ones winning:
1. Defaults on ChatConfig
2. An optional YAML file (validated with pydantic)
3. Command line arguments

The API key itself is never stored in the YAML file; it is read from an
environment variable whose name is configurable.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

from ..rendering.block_renderer import TitleCleanup
from ..rendering.segmenter import SeparatorPolicy

# Gemini's OpenAI-compatible endpoint
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai"
DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_API_KEY_ENVS = ("API_KEY", "GEMINI_API_KEY")


# ============================================================================
# YAML file schema
# ============================================================================

class ModelSection(BaseModel):
    """Model endpoint and generation settings."""

    base_url: Optional[str] = Field(default=None, description="OpenAI-compatible base URL")
    model: Optional[str] = Field(default=None, description="Model name")
    api_key_env: Optional[str] = Field(
        default=None,
        description="Environment variable holding the API key"
    )
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    timeout: Optional[float] = Field(default=None, gt=0)
    system_prompt_path: Optional[str] = Field(
        default=None,
        description="Text file replacing the built-in system prompt"
    )


class DisplaySection(BaseModel):
    """Terminal rendering settings."""

    title_cleanup: Optional[TitleCleanup] = None
    separator_policy: Optional[SeparatorPolicy] = None
    refresh_per_second: Optional[int] = Field(default=None, ge=1, le=60)


class FileConfig(BaseModel):
    """Complete YAML configuration file."""

    model: ModelSection = Field(default_factory=ModelSection)
    display: DisplaySection = Field(default_factory=DisplaySection)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'FileConfig':
        return cls(**load_yaml_config(yaml_path))

    def flatten(self) -> Dict[str, Any]:
        """Non-empty values keyed by ChatConfig field name."""
        values = {**self.model.model_dump(), **self.display.model_dump()}
        return {key: value for key, value in values.items() if value is not None}


def load_yaml_config(yaml_path: str) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the YAML is empty or invalid
    """
    path = Path(yaml_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {yaml_path}: {e}")

    if data is None:
        raise ValueError(f"Empty or invalid YAML file: {yaml_path}")
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {yaml_path}")

    return data


# ============================================================================
# Runtime configuration
# ============================================================================

@dataclass
class ChatConfig:
    """Configuration for the chat client."""
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    api_key_env: Optional[str] = None
    temperature: float = 0.4
    max_tokens: int = 8192
    timeout: float = 120.0
    system_prompt_path: Optional[str] = None
    title_cleanup: TitleCleanup = TitleCleanup.SYMBOLS
    separator_policy: SeparatorPolicy = SeparatorPolicy.CONTAINS
    refresh_per_second: int = 10
    debug: bool = False

    def __post_init__(self):
        """Validate and normalize configuration."""
        self.base_url = self.base_url.rstrip('/')
        self.title_cleanup = TitleCleanup(self.title_cleanup)
        self.separator_policy = SeparatorPolicy(self.separator_policy)

    @property
    def api_key_envs(self):
        return (self.api_key_env,) if self.api_key_env else DEFAULT_API_KEY_ENVS

    def resolve_api_key(self) -> Optional[str]:
        """Return the API key from the environment, or None when unset."""
        for name in self.api_key_envs:
            value = os.environ.get(name, "").strip()
            if value:
                return value
        return None

    def load_system_prompt(self) -> str:
        from .prompts import SYSTEM_PROMPT
        if not self.system_prompt_path:
            return SYSTEM_PROMPT
        return Path(self.system_prompt_path).read_text(encoding='utf-8')

    @classmethod
    def from_args(cls, args) -> 'ChatConfig':
        """Create config from parsed command line arguments.

        A `--config` YAML file is applied first; any argument that was
        given on the command line (not None) overrides it.
        """
        values: Dict[str, Any] = {}
        config_path = getattr(args, 'config', None)
        if config_path:
            values.update(FileConfig.from_yaml(config_path).flatten())

        for name in ('base_url', 'model', 'api_key_env', 'temperature', 'max_tokens',
                     'system_prompt_path', 'title_cleanup', 'separator_policy'):
            value = getattr(args, name, None)
            if value is not None:
                values[name] = value

        values['debug'] = getattr(args, 'debug', False)
        return cls(**values)
