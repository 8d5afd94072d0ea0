"""Allow running as ``python -m autogenre``."""

import sys

from autogenre.main import main

if __name__ == "__main__":
    sys.exit(main())
