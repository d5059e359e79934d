"""
scribefix/evaluation.py
========================
Golden transcript scoring: how much does post-processing move a raw ASR
transcript towards its human reference?

Golden file format (markdown):

    ## Sample A — optional title
    ### Raw
    they went over their to get there things.
    ### Reference
    They went over there to get their things.

Scores use jiwer WER/CER on normalized text (lower-case, punctuation
stripped, apostrophes kept so "they're" and "their" stay distinct).
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import jiwer

_SAMPLE_HEADER = re.compile(r"^##\s+Sample\s+(\S+)")
_BLOCK_HEADER = re.compile(r"^###\s+(Raw|Reference)\b", re.IGNORECASE)


def normalize_text(text: str) -> str:
    """Lower-case, drop punctuation except apostrophes, collapse whitespace."""
    text = text.lower()
    text = re.sub(r"[^\w\s']", " ", text)
    return " ".join(text.split())


# ─────────────────────────────────────────────────────────────
# Golden samples
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GoldenSample:
    label: str
    raw: str
    reference: str


def parse_golden_file(path: str | Path) -> list[GoldenSample]:
    """Parse `## Sample X` sections with `### Raw` / `### Reference` blocks."""
    samples: list[GoldenSample] = []
    label: str | None = None
    blocks: dict[str, list[str]] = {}
    current: str | None = None

    def flush():
        if label is None:
            return
        raw = " ".join(blocks.get("raw", [])).strip()
        ref = " ".join(blocks.get("reference", [])).strip()
        if raw and ref:
            samples.append(GoldenSample(label, raw, ref))

    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.rstrip()
            m = _SAMPLE_HEADER.match(line)
            if m:
                flush()
                label, blocks, current = m.group(1), {}, None
                continue
            m = _BLOCK_HEADER.match(line)
            if m:
                current = m.group(1).lower()
                continue
            if line.startswith("#"):
                current = None
                continue
            if label is not None and current and line.strip():
                blocks.setdefault(current, []).append(line.strip())
    flush()
    return samples


# ─────────────────────────────────────────────────────────────
# Scoring
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SampleScore:
    label: str
    hypothesis: str
    wer_before: float
    wer_after: float
    cer_before: float
    cer_after: float

    @property
    def improved(self) -> bool:
        return self.wer_after < self.wer_before

    @property
    def regressed(self) -> bool:
        return self.wer_after > self.wer_before


@dataclass
class EvaluationReport:
    scores: list[SampleScore] = field(default_factory=list)

    @property
    def mean_wer_before(self) -> float:
        return _mean([s.wer_before for s in self.scores])

    @property
    def mean_wer_after(self) -> float:
        return _mean([s.wer_after for s in self.scores])

    @property
    def regressions(self) -> list[SampleScore]:
        return [s for s in self.scores if s.regressed]


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def score_sample(sample: GoldenSample, process: Callable[[str], str]) -> SampleScore:
    """Score one sample. `process` is any text -> text post-processor."""
    hypothesis = process(sample.raw)
    ref = normalize_text(sample.reference)
    before = normalize_text(sample.raw)
    after = normalize_text(hypothesis)
    return SampleScore(
        label=sample.label,
        hypothesis=hypothesis,
        wer_before=jiwer.wer(ref, before),
        wer_after=jiwer.wer(ref, after),
        cer_before=jiwer.cer(ref, before),
        cer_after=jiwer.cer(ref, after),
    )


def evaluate(samples: list[GoldenSample], process: Callable[[str], str]) -> EvaluationReport:
    return EvaluationReport([score_sample(s, process) for s in samples])


def format_report(report: EvaluationReport) -> str:
    lines = [
        f"{'sample':<10} {'WER before':>10} {'WER after':>10} {'CER before':>10} {'CER after':>10}",
        "-" * 54,
    ]
    for s in report.scores:
        mark = " +" if s.improved else (" !" if s.regressed else "")
        lines.append(
            f"{s.label:<10} {s.wer_before:>10.2%} {s.wer_after:>10.2%} "
            f"{s.cer_before:>10.2%} {s.cer_after:>10.2%}{mark}"
        )
    lines.append("-" * 54)
    lines.append(
        f"{'mean':<10} {report.mean_wer_before:>10.2%} {report.mean_wer_after:>10.2%}"
    )
    if report.regressions:
        lines.append("regressions: " + ", ".join(s.label for s in report.regressions))
    return "\n".join(lines)
