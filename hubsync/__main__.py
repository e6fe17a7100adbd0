"""Allow running hubsync as a module: python -m hubsync."""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    main()
