#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from rakat.config import SAMPLE_RATE_HZ, build_thresholds, parse_overrides
from rakat.replay import load_recording, run_replay


def _read_json(path: Path) -> object:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Replay a recorded accelerometer session through the rakat detector.")
    parser.add_argument("recording", type=Path, help="JSON list of {timestamp, x, y, z} samples.")
    parser.add_argument("--overrides", type=Path, default=None, help="JSON threshold overrides blob.")
    parser.add_argument("--sample-rate", type=int, default=SAMPLE_RATE_HZ, help="Recording sample rate (Hz).")
    parser.add_argument("--filter", action="store_true", help="Low-pass filter the recorded vectors first.")
    parser.add_argument("--debug", action="store_true", help="Print detector debug lines to stderr.")
    parser.add_argument("--timeline", action="store_true", help="Include the state timeline in the output.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    overrides = None
    if args.overrides:
        try:
            overrides = parse_overrides(_read_json(args.overrides))
        except (OSError, json.JSONDecodeError) as exc:
            print(f"[replay] Cannot read overrides {args.overrides}: {exc}", file=sys.stderr)
            return 2
    config = build_thresholds(overrides, sample_rate_hz=args.sample_rate)

    try:
        samples = load_recording(_read_json(args.recording))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"[replay] Cannot read recording {args.recording}: {exc}", file=sys.stderr)
        return 2
    except ValidationError as exc:
        print(f"[replay] Invalid recording {args.recording}: {exc}", file=sys.stderr)
        return 2

    result = run_replay(samples, config, debug=args.debug, apply_filter=args.filter)
    for line in result.debug_log:
        print(line, file=sys.stderr)

    out = result.to_dict()
    if not args.timeline:
        out.pop("state_timeline")
    out["samples"] = len(samples)
    print(json.dumps(out, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
