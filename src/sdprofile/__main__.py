"""Main entry point for sdprofile."""

from sdprofile.cli.main import main

if __name__ == "__main__":
    main()
