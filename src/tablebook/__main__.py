"""Allow running as `python -m tablebook`."""

from tablebook.cli import main

main()
