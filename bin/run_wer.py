#!/usr/bin/env python3
"""
Golden WER report — scores the post-processor against reference transcripts.

Usage: python3 bin/run_wer.py [GOLDEN_FILE]
"""
import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from scribefix.evaluation import evaluate, format_report, parse_golden_file
from scribefix.pipeline import TranscriptPostProcessor

GOLDEN_FILE = os.path.join(os.path.dirname(__file__), "..", "tests", "fixtures", "golden", "samples.md")


def main():
    path = sys.argv[1] if len(sys.argv) > 1 else GOLDEN_FILE
    if not os.path.exists(path):
        print(f"ERROR: golden file not found: {path}")
        sys.exit(1)

    samples = parse_golden_file(path)
    print(f"\n{'='*60}")
    print(f"scribefix Golden WER — {len(samples)} samples")
    print(f"{'='*60}")

    processor = TranscriptPostProcessor({"homonym_correction": True, "readability_pass": True})
    report = evaluate(samples, processor.run)
    print(format_report(report))
    sys.exit(1 if report.regressions else 0)


if __name__ == "__main__":
    main()
