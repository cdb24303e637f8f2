"""Configuration module for agent-cowork."""

from agent_cowork.config.loader import get_config_path, load_config, save_config
from agent_cowork.config.schema import Config

__all__ = ["Config", "get_config_path", "load_config", "save_config"]
