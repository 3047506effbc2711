from __future__ import annotations

import sys

from logforge_shell.ui.app import run_ui


def main() -> None:
    run_ui()


if __name__ == "__main__":
    sys.exit(main())
