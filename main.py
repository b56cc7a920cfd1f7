import sys

from tablegenerator.analyze_results import main

if __name__ == "__main__":
    sys.exit(main())
