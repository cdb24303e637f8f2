"""CLI module for agent-cowork."""
