"""Allow ``python -m logone``."""

from logone.cli.app import main

main()
