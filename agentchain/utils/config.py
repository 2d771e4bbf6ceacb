"""
Configuration Management
========================

Typed configuration for the transport, agent defaults and workflows.

All environment variables are read here, once, and turned into frozen
dataclasses. Nothing else in the package calls os.getenv(); the values
are passed explicitly to the objects that need them (the OpenAI
transport gets an OpenAIConfig at construction time, agents get their
sampling defaults from AgentDefaults).

Usage:
    from agentchain.utils.config import get_config

    config = get_config()
    transport = OpenAITransport(config.openai)
    print(config.agent.max_tokens)
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _required(name: str) -> str:
    """
    Get a required environment variable.

    Raises:
        ValueError: If the variable is not set or empty
    """
    value = os.getenv(name)
    if not value:
        raise ValueError(
            f"Missing required environment variable: {name}\n"
            f"Please ensure {name} is set in your environment or .env file."
        )
    return value


def _optional(name: str, default: str) -> str:
    """Get an optional environment variable with a default."""
    return os.getenv(name) or default


def _optional_int(name: str, default: int) -> int:
    """
    Get an optional integer environment variable.

    Raises:
        ValueError: If the variable is set but is not an integer
    """
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _optional_float(name: str, default: float | None) -> float | None:
    """
    Get an optional float environment variable.

    Raises:
        ValueError: If the variable is set but is not a number
    """
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


# ==============================================================================
# Configuration Dataclasses
# ==============================================================================

@dataclass(frozen=True)
class OpenAIConfig:
    """OpenAI API configuration."""
    api_key: str
    model: str = "gpt-4-turbo"
    base_url: str | None = None      # For OpenAI-compatible gateways
    timeout_seconds: float = 60.0    # Per-request timeout

    def __repr__(self) -> str:
        # Keep the key out of logs and tracebacks
        return (
            f"OpenAIConfig(api_key='***', model={self.model!r}, "
            f"base_url={self.base_url!r}, timeout_seconds={self.timeout_seconds!r})"
        )


@dataclass(frozen=True)
class AgentDefaults:
    """Sampling parameters and budgets applied to agents built by the app."""
    temperature: float = 0.1
    max_tokens: int = 4096
    max_loops: int = 10


@dataclass(frozen=True)
class WorkflowConfig:
    """Workflow execution settings."""
    timeout_seconds: float | None = None


@dataclass(frozen=True)
class Config:
    """
    Root configuration object.

    Access via:
        config = get_config()
        config.openai.model
        config.agent.temperature
    """
    openai: OpenAIConfig
    agent: AgentDefaults
    workflow: WorkflowConfig
    log_level: str


def load_config() -> Config:
    """
    Load and validate all configuration from the environment.

    Loads a .env file first (existing environment variables win).

    Raises:
        ValueError: If required configuration is missing or malformed
    """
    load_dotenv()

    return Config(
        openai=OpenAIConfig(
            api_key=_required("OPENAI_API_KEY"),
            model=_optional("OPENAI_MODEL", "gpt-4-turbo"),
            base_url=os.getenv("OPENAI_BASE_URL") or None,
            timeout_seconds=_optional_float("OPENAI_TIMEOUT_SECONDS", 60.0),
        ),
        agent=AgentDefaults(
            temperature=_optional_float("AGENT_TEMPERATURE", 0.1),
            max_tokens=_optional_int("AGENT_MAX_TOKENS", 4096),
            max_loops=_optional_int("AGENT_MAX_LOOPS", 10),
        ),
        workflow=WorkflowConfig(
            timeout_seconds=_optional_float("WORKFLOW_TIMEOUT_SECONDS", None),
        ),
        log_level=_optional("LOG_LEVEL", "info"),
    )


# ==============================================================================
# Singleton
# ==============================================================================

_config_instance: Config | None = None


def get_config() -> Config:
    """Get the configuration, loading it on first access."""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config_instance
    _config_instance = None
