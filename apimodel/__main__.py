# File: apimodel/__main__.py
"""
apimodel - Module entry point.

Allows running the generator directly via::

    python -m apimodel --source petstore.yaml --output ./generated

Delegates to ``apimodel.cli.main``.
"""

from __future__ import annotations


def main() -> None:
    from apimodel.cli import main as cli_main

    cli_main()


if __name__ == "__main__":
    main()
