"""
Run the schedule trigger service until SIGINT/SIGTERM.
"""

from __future__ import annotations

from plan_changer.main import main

if __name__ == "__main__":
    raise SystemExit(main())
