from __future__ import annotations

from quickshop.cli import run
from quickshop.log import setup_logging


def main() -> int:
  setup_logging()
  return run()


if __name__ == "__main__":
  raise SystemExit(main())
