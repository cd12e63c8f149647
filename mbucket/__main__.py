import sys

from mbucket.cli import main

sys.exit(main())
