"""``python -m genealink`` and the ``genealink`` console script."""

import sys

from genealink.cli import cli_main


def main(argv: list[str] | None = None) -> int:
    """Run the CLI; Ctrl-C during a long tree build exits with status 130."""
    try:
        return cli_main(argv)
    except KeyboardInterrupt:
        print("\n✗ Interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
