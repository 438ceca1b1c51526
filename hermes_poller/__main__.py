"""Allow ``python -m hermes_poller``."""
from .cli import main

if __name__ == "__main__":
    main()
