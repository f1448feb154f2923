from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from advisory_lifecycle.contracts import EngineSettings
from advisory_lifecycle.demo_runner import run_packs
from advisory_lifecycle.logging_config import setup_logger


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay composer scenario packs through the advisory engine.")
    parser.add_argument("--packs", default=str(Path(__file__).parent / "packs"), help="Directory of *.json scenario packs.")
    parser.add_argument("--output", required=True, help="Path to write the session summary JSON.")
    parser.add_argument("--verbose", action="store_true", help="Log engine decisions at DEBUG level.")
    return parser.parse_args()


def write_report(*, output_path: str | Path, report: dict) -> Path:
    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(report, indent=2) + "\n", encoding="utf-8")
    return out


def main() -> int:
    args = _parse_args()
    setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)
    report = run_packs(Path(args.packs), settings=EngineSettings.from_env())
    write_report(output_path=args.output, report=report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
