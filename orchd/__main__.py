"""Allow ``python -m orchd``."""

from orchd.cli import main

if __name__ == "__main__":
    main(prog_name="orchd")
