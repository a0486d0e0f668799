"""Entry point for 'python -m usermanagement' command."""

from usermanagement.cli import main

if __name__ == "__main__":
    main()
