from __future__ import annotations

from vbuilder.cli import main

raise SystemExit(main())
