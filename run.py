"""Project root entry point for launching the web interface."""

from __future__ import annotations

import os
import sys
from pathlib import Path


def _bootstrap_path() -> None:
    """Ensure the project root is importable so ``src`` resolves as a package."""
    project_root = Path(__file__).resolve().parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


def main():
    _bootstrap_path()
    from src.web import create_app

    app = create_app()
    port = int(os.environ.get("TRANSLATION_DESK_PORT", "5500"))
    app.run(host="0.0.0.0", port=port, debug=True)


if __name__ == "__main__":
    main()
