import sys

from vision_gateway.cli import main

sys.exit(main())
