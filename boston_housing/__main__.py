"""
Module entry point for ``python -m boston_housing``.

This simply forwards to the Click CLI defined in ``boston_housing.cli``.
"""

from .cli import cli


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
