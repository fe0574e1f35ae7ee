"""Allow ``python -m brewline``."""
import sys

from brewline.cli import main

sys.exit(main())
