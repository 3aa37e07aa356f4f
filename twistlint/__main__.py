"""Entry point for ``python -m twistlint``."""

from twistlint.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
