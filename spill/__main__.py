import sys

from spill.cli import main

sys.exit(main())
