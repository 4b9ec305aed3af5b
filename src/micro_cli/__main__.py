"""Allow ``python -m micro_cli``."""

from micro_cli.cli.main import main

if __name__ == "__main__":
    main()
