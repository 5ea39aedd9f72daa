#!/usr/bin/env python3
import argparse
from pathlib import Path

from pairwise.core.io import read_jsonl, read_payload
from pairwise.core.tables import combined_frames, write_frames


def main() -> None:
    p = argparse.ArgumentParser(description="Prepare tidy trial/event CSVs from session payloads.")
    p.add_argument("payloads", type=Path, nargs="+", help="Payload JSON files or JSONL files of payloads")
    p.add_argument("--out", type=Path, required=True, help="Output directory")
    args = p.parse_args()

    payloads = []
    for path in args.payloads:
        if path.suffix == ".jsonl":
            payloads.extend(read_jsonl(path))
        else:
            payloads.append(read_payload(path))

    trials, events = combined_frames(payloads)
    write_frames(trials, events, args.out)
    print(f"Wrote {len(trials)} trials and {len(events)} events from {len(payloads)} sessions to {args.out}")


if __name__ == "__main__":
    main()
