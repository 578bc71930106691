"""Allows `python -m cli start|dump ...` without the installed script."""

from cli.main import run

if __name__ == "__main__":
    run()
