import sys

from planty.cli import main

sys.exit(main())
