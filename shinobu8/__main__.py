import sys

from shinobu8.main import main

sys.exit(main())
