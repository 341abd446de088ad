"""Allow ``python -m tablekit``."""

import sys

from .cli import main


sys.exit(main())
