#!/usr/bin/env python3
"""
boxtrack - replay recorded detections through a tracking session
================================================================

Input is JSON lines, one frame per line. Each line is either an array of
detections or an object with a "detections" array. A detection carries
x, y, w, h (or "bbox": [x, y, w, h]) and optionally "score" and "label"
(alias "class").

Output is one JSON line per frame with the tracks sorted by id.

Run:
  boxtrack --input detections.jsonl --output tracks.jsonl
  python -m boxtrack.main --input detections.jsonl --config session.yaml
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import IO, Iterator, List, Optional, Sequence

from .core.config import DEFAULT_CONFIG, SessionConfig
from .core.events import EventBus, EventLogger
from .core.models import Box, RawDetection
from .tracking.session import TrackingSession

logger = logging.getLogger(__name__)


# =============================================================================
# INPUT PARSING
# =============================================================================

def parse_detection(item: dict) -> RawDetection:
    """Build a RawDetection from one JSON detection object."""
    if "bbox" in item:
        x, y, w, h = item["bbox"]
    else:
        x, y, w, h = item["x"], item["y"], item["w"], item["h"]
    return RawDetection(
        box=Box(float(x), float(y), float(w), float(h)),
        score=float(item.get("score", 1.0)),
        label=str(item.get("label", item.get("class", "person"))),
    )


def read_frames(stream: IO[str]) -> Iterator[List[RawDetection]]:
    """
    Yield one detection list per non-blank input line.

    Raises:
        ValueError: if a line is not valid JSON or lacks box fields
    """
    for line_no, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            payload = json.loads(line)
            items = payload["detections"] if isinstance(payload, dict) else payload
            yield [parse_detection(item) for item in items]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Line {line_no}: invalid frame ({e})") from e


# =============================================================================
# MAIN
# =============================================================================

def run(
    input_path: str,
    output: IO[str],
    config: Optional[SessionConfig] = None,
    log_events: bool = False
) -> dict:
    """
    Replay a detection file and write tracks per frame.

    Returns:
        Session statistics after the last frame
    """
    bus = None
    if log_events:
        bus = EventBus()
        bus.subscribe(None, EventLogger(logging.DEBUG))

    session = TrackingSession(config, event_bus=bus)

    with Path(input_path).open("r", encoding="utf-8") as f:
        for detections in read_frames(f):
            frame = session.step(detections)
            output.write(json.dumps(frame.to_dict()) + "\n")

    return session.get_statistics()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Replay detections through the box tracker")
    parser.add_argument("--input", "-i", required=True, help="JSON lines file, one frame per line")
    parser.add_argument("--output", "-o", help="Output JSON lines file (default: stdout)")
    parser.add_argument("--config", "-c", help="Session config YAML")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log lifecycle events")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = SessionConfig.from_yaml(args.config) if args.config else DEFAULT_CONFIG
        if args.output:
            with open(args.output, "w", encoding="utf-8") as out:
                stats = run(args.input, out, config, log_events=args.verbose)
        else:
            stats = run(args.input, sys.stdout, config, log_events=args.verbose)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Replay failed: {e}")
        return 1

    for key, value in stats.items():
        logger.info(f"{key}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
