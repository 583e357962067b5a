"""Allow ``python -m rng_monitor``."""

from rng_monitor.cli import main

if __name__ == "__main__":
    main()
