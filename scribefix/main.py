"""
scribefix command line.

    scribefix transcript.txt > fixed.txt
    cat transcript.txt | scribefix --no-readability
    scribefix --evaluate tests/fixtures/golden/samples.md
"""
import argparse
import logging
import sys

from .logger import init_logging
from .rules import CatalogError

logger = logging.getLogger(__name__)


class _CliSettings(dict):
    """Persisted settings overlaid with command-line flags."""

    def __init__(self, base, overrides):
        super().__init__()
        self._base = base
        self.update({k: v for k, v in overrides.items() if v is not None})

    def get(self, key, default=None):
        if key in self:
            return self[key]
        return self._base.get(key, default)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scribefix",
        description="Correct homonym confusions in speech transcripts.",
    )
    parser.add_argument("file", nargs="?", help="transcript file (default: stdin)")
    parser.add_argument("--rules", metavar="PATH", help="extra homonym rules (JSON)")
    parser.add_argument("--no-homonyms", action="store_true",
                        help="skip homonym correction")
    parser.add_argument("--no-readability", action="store_true",
                        help="skip the capitalization/punctuation pass")
    parser.add_argument("--evaluate", metavar="GOLDEN",
                        help="score post-processing against a golden samples file")
    return parser


def _read_stdin() -> str:
    # Undecodable bytes become U+FFFD rather than aborting the run.
    raw = getattr(sys.stdin, "buffer", None)
    if raw is None:
        return sys.stdin.read()
    return raw.read().decode("utf-8", errors="replace")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    init_logging("scribefix")

    from .pipeline import TranscriptPostProcessor
    from .settings import SettingsManager

    settings = _CliSettings(SettingsManager(), {
        "custom_rules_path": args.rules,
        "homonym_correction": False if args.no_homonyms else None,
        "readability_pass": False if args.no_readability else None,
    })

    try:
        processor = TranscriptPostProcessor(settings)
    except CatalogError as e:
        logger.critical("invalid homonym rules: %s", e)
        return 1

    if args.evaluate:
        from .evaluation import evaluate, format_report, parse_golden_file
        try:
            samples = parse_golden_file(args.evaluate)
        except OSError as e:
            logger.error("cannot read golden file %s: %s", args.evaluate, e)
            return 1
        sys.stdout.write(format_report(evaluate(samples, processor.run)) + "\n")
        return 0

    try:
        if args.file:
            with open(args.file, encoding="utf-8", errors="replace") as f:
                text = f.read()
        else:
            text = _read_stdin()
    except OSError as e:
        logger.error("cannot read transcript %s: %s", args.file, e)
        return 1

    sys.stdout.write(processor.run(text) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
