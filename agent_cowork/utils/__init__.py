"""Utility functions for agent-cowork."""

from agent_cowork.utils.helpers import ensure_dir, get_data_path

__all__ = ["ensure_dir", "get_data_path"]
