import sys

from dub_bootstrap.runner import main

sys.exit(main())
