import sys

from dkic.cli import main

sys.exit(main())
