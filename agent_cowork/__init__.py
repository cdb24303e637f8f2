"""agent-cowork - desktop front-end core for a coding-agent backend."""

__version__ = "0.1.0"
__logo__ = "◆"
