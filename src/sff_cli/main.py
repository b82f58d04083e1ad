from __future__ import annotations

from sff_cli.cli import app


def run() -> None:
    app()
