import sys

from nodescout.main import main

sys.exit(main())
