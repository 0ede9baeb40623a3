"""Module entry point for python -m order_manager."""

from __future__ import annotations

from order_manager.app import main


if __name__ == "__main__":
    raise SystemExit(main())
