"""Markdown report generator for SP 800-90B assessment results."""

from __future__ import annotations

import platform
from datetime import datetime
from pathlib import Path

from entropy_assessment import __version__
from entropy_assessment.result import AssessmentResult


def _pass_icon(passed: bool) -> str:
    return "✅" if passed else "❌"


def _fmt_estimate(value: float, valid: bool) -> str:
    return f"{value:.6f}" if valid else "N/A"


def generate_sample_report(name: str, result: AssessmentResult) -> str:
    """Generate markdown section for a single sample."""
    lines = [f"### {name}"]
    if not result.ok:
        lines.append(f"**Error {result.error_code}:** {result.error_message}\n")
        return "\n".join(lines)

    source = "raw noise source" if result.initial_entropy else "conditioned output"
    lines += [
        f"**{result.mode.value}** ({source}) | **Bits/symbol: {result.word_size}** "
        f"| **Samples: {result.sample_size:,}**\n",
        f"- H_original: {result.h_original:.6f}",
        f"- H_bitstring: {result.h_bitstring:.6f}",
        f"- H_assessed: **{result.h_assessed:.6f}**\n",
        "| Estimator | Result | Estimate |",
        "|-----------|--------|----------|",
    ]
    for est in result.estimators:
        lines.append(
            f"| {est.name} | {_pass_icon(est.passed)} | {_fmt_estimate(est.entropy_estimate, est.is_entropy_valid)} |"
        )
    lines.append("")
    return "\n".join(lines)


def generate_report(
    results: dict[str, AssessmentResult],
    output_path: str | Path | None = None,
) -> str:
    """Generate complete markdown report for all assessed samples."""
    now = datetime.now()
    ranked = sorted(results.items(), key=lambda x: (x[1].ok, x[1].min_entropy), reverse=True)

    lines = [
        "# SP 800-90B Entropy Assessment Report",
        "",
        f"**Generated:** {now.strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Tool:** entropy-assessment {__version__}",
        f"**Machine:** {platform.node()} ({platform.machine()}, {platform.system()} {platform.release()})",
        "",
        "## Summary",
        "",
        "| Rank | Sample | Mode | Bits | Min-Entropy | Status |",
        "|------|--------|------|------|-------------|--------|",
    ]
    for i, (name, r) in enumerate(ranked, 1):
        status = "ok" if r.ok else f"error {r.error_code}"
        h = f"{r.min_entropy:.6f}" if r.ok else "—"
        lines.append(f"| {i} | {name} | {r.mode.value} | {r.word_size or '—'} | {h} | {status} |")

    lines += ["", "---", "", "## Detailed Results", ""]
    for name, r in ranked:
        lines.append(generate_sample_report(name, r))
        lines.append("---\n")

    report = "\n".join(lines)

    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report)

    return report
