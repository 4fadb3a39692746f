"""Executable entry point for `python -m arb_deployments`."""

from .cli import app


def main() -> None:  # pragma: no cover - thin wrapper
    app()


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
