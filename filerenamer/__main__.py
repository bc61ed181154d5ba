"""Allow ``python -m filerenamer``."""
import sys

from .cli import main

sys.exit(main())
