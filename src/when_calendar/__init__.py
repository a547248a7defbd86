"""When: a shared availability calendar relayed over websockets."""

from __future__ import annotations


def main() -> None:
    from .cli import main as cli_main

    raise SystemExit(cli_main())
