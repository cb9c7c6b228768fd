import sys

from kanban.cli import main

sys.exit(main())
