"""Allow running bqs as ``python -m bqs``."""

import sys

from bqs.cli.app import main


if __name__ == "__main__":
    sys.exit(main())
