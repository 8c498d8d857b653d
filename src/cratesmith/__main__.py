"""Allow running cratesmith as ``python -m cratesmith``."""

from cratesmith.cli.app import main

main()
