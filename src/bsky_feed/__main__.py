import sys

from bsky_feed.main import main

sys.exit(main())
