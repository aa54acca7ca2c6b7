"""Main entry point for pdf-redact."""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from core.cli import build_parser, run
from core.config import config


def main(argv: Optional[Sequence[str]] = None):
    args = build_parser().parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    sys.exit(run(args))


if __name__ == "__main__":
    main()
