#!/usr/bin/env python3
"""Evaluate an arithmetic expression from the command line.

Usage:
  ./scripts/calc.py "2 + 2 * (3 - 1)"
  echo "10/4" | ./scripts/calc.py

Outputs JSON:
  {"status":"ok","result":6.0}
  {"status":"error","error":"division_by_zero","kind":"runtime","message":"..."}
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from calc_service.evaluator import evaluate_result  # noqa: E402


def _read_expression(argv: list[str]) -> str:
    if len(argv) > 1:
        return " ".join(argv[1:]).strip()
    return sys.stdin.read().strip()


def main() -> int:
    expr = _read_expression(sys.argv)
    outcome = evaluate_result(expr)
    print(json.dumps(outcome.to_dict()))
    return 0 if outcome.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
