"""Allow running as: python -m stormcell"""

import sys

from .app import main

sys.exit(main())
