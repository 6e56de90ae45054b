import sys

from gl_batch.cli import main

sys.exit(main())
