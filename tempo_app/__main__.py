import sys

from tempo_app.cli import main

# Entry point for `python -m tempo_app`
if __name__ == "__main__":
    sys.exit(main())
