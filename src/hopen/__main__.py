"""Allow ``python -m hopen`` (used by the background daemon launcher)."""

import sys

from hopen.cli._dispatcher import main

if __name__ == "__main__":
    sys.exit(main())
