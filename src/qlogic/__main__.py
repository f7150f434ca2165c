import sys

from qlogic.cli import main

sys.exit(main())
