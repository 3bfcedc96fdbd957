# flexpro/__main__.py
# Entry point for `python -m flexpro`; same commands as the `flexpro` console script.
from .cli import main

if __name__ == "__main__":
    main()
