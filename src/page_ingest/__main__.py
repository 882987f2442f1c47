import sys

from page_ingest.cli import main

sys.exit(main())
