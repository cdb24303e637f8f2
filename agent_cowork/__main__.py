"""Entry point for ``python -m agent_cowork``."""

from agent_cowork.cli.commands import app

if __name__ == "__main__":
    app()
