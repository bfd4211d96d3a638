import sys

from twig.cli import main

sys.exit(main())
