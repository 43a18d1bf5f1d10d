import sys

from .KUBEFS import main

sys.exit(main())
