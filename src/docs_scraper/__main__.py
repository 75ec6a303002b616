import sys

from docs_scraper.cli import main


sys.exit(main())
