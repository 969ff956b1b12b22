"""Entry point for running hexchart as a module: ``python -m hexchart [command]``."""

from __future__ import annotations


def main() -> None:
    """Main entry point for module execution."""
    from hexchart.cli import main as cli_main

    cli_main()


if __name__ == "__main__":
    main()
