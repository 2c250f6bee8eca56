import sys

from wsh.cli import main

sys.exit(main())
