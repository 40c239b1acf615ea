from __future__ import annotations

from sheetcrm.cli.app import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
