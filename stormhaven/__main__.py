"""Allow ``python -m stormhaven``."""

import sys

from stormhaven.cli import main


sys.exit(main())
