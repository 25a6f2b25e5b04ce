"""Allow ``python -m treefs``."""

import sys

from treefs.main import main


if __name__ == '__main__':
    sys.exit(main())
