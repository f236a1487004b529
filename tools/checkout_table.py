#!/usr/bin/env python3
"""
checkout_table.py

Print the checkout hint for every score in a range, one per line, e.g. to review the
simple-out search order against the double-out table.

Usage:
  python tools/checkout_table.py [--mode simple|double] [--low 2] [--high 170]

Scores without a hint are printed with "-".
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from checkout import MAX_CHECKOUT, format_checkout, suggest_checkout


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Print checkout suggestions for a range of scores")
    p.add_argument("--mode", choices=("simple", "double"), default="double", help="Finish mode (default: double)")
    p.add_argument("--low", type=int, default=1, help="Lowest score to print (default: 1)")
    p.add_argument("--high", type=int, default=MAX_CHECKOUT, help=f"Highest score to print (default: {MAX_CHECKOUT})")
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    if args.low > args.high:
        print(f"ERROR: --low ({args.low}) is greater than --high ({args.high})", file=sys.stderr)
        return 2

    missing = 0
    for score in range(args.high, args.low - 1, -1):
        text = format_checkout(suggest_checkout(score, args.mode))
        if text is None:
            missing += 1
        print(f"{score}: {text or '-'}")

    print(f"{args.high - args.low + 1 - missing} of {args.high - args.low + 1} scores have a {args.mode}-out hint.")
    return 0


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
