"""Entry point for ``python -m hisaab``."""

from hisaab.cli import main

main()
