"""Allow ``python -m autogenerate``."""

import sys

from autogenerate.cli import main

sys.exit(main())
