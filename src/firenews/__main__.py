import sys

from firenews.cli import main

sys.exit(main())
