"""Command line entrypoint: forwards to :func:`photostrip.cli.main`.

Run from the project root, e.g. ``python main.py compose --template strip-4
--photo a.jpg --output strip.jpg``.
"""

import sys

from photostrip.cli import main


if __name__ == "__main__":
    sys.exit(main())
