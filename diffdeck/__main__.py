"""Module entrypoint for ``python -m diffdeck``."""

from .cli import main

if __name__ == "__main__":
    main()
