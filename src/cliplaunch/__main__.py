"""Module entrypoint for `python -m cliplaunch`."""

from __future__ import annotations

from cliplaunch.cli import main_entry

if __name__ == "__main__":
    raise SystemExit(main_entry())
