import sys

from videopalette.cli import main

if __name__ == "__main__":
    sys.exit(main())
