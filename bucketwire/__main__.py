import sys

from bucketwire.cli import main

sys.exit(main())
