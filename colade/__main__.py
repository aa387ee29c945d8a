"""Allow ``python -m colade``."""

from .cli import main

main()
