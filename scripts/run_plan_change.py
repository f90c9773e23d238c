"""
Run one plan change from CLI.
"""

from __future__ import annotations

from plan_changer.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
