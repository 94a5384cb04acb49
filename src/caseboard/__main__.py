"""cli entrypoint for caseboard."""

import argparse
import logging
from pathlib import Path

from .tui.app import run


def main():
    parser = argparse.ArgumentParser(
        description="caseboard - build causal maps for history cases"
    )
    parser.add_argument(
        "case_id",
        nargs="?",
        default="berlin-wall",
        help="case to open (default: berlin-wall)",
    )
    parser.add_argument(
        "--data-dir",
        "-d",
        help="where mind maps are stored (default: ~/.caseboard)",
    )
    parser.add_argument("--cases", "-c", help="json file with the case catalogue")
    parser.add_argument("--mock", "-m", action="store_true", help="use mock chat client")
    parser.add_argument("--log-file", help="write logs here (the terminal belongs to the ui)")
    parser.add_argument("--log-level", default="WARNING", help="logging level")

    args = parser.parse_args()
    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=getattr(logging, args.log_level.upper(), logging.WARNING),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    run(
        case_id=args.case_id,
        data_dir=Path(args.data_dir) if args.data_dir else None,
        cases_path=Path(args.cases) if args.cases else None,
        mock=args.mock,
    )


if __name__ == "__main__":
    main()
