import sys

from appscout.cli import main

sys.exit(main())
