import sys

from nomad_nodes.cli import main

sys.exit(main())
