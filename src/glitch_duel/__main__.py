"""Allow running as: python -m glitch_duel"""

import sys

from .cli import main

sys.exit(main())
