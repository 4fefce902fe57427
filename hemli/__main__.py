import sys

from hemli.cli import main

sys.exit(main())
