"""Entry point for 'python -m xbs' command."""

from xbs.cli import main

if __name__ == "__main__":
    main()
