"""
Utilities Module
================

Common utilities shared across the package:
- logger: levelled, context-aware logging
- config: typed configuration loaded from the environment
"""

from agentchain.utils.logger import Logger, logger, set_log_level
from agentchain.utils.config import get_config, Config

__all__ = ["Logger", "logger", "set_log_level", "get_config", "Config"]
