"""CLI for entropy-assessment."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from entropy_assessment import __version__
from entropy_assessment.log import LOG_LEVELS, configure_logging


@click.group()
@click.version_option(__version__, prog_name="ea-tool")
@click.option("--log-level", default="warning", type=click.Choice(sorted(LOG_LEVELS)),
              help="Diagnostic log level (stderr).")
def main(log_level: str) -> None:
    """SP 800-90B entropy assessment tool."""
    configure_logging(log_level)


# ────────────────────────────────────────────────────────────
# Assessment
# ────────────────────────────────────────────────────────────


@main.command("assess")
@click.argument("file", required=False, default="-")
@click.option("--iid", is_flag=True, help="Run the IID test.")
@click.option("--non-iid", "non_iid", is_flag=True, help="Run the Non-IID test.")
@click.option("--bits", default=0, type=int, help="Bits per symbol (1-8), 0 for auto-detect.")
@click.option("--conditioned", is_flag=True, help="Assess conditioned output instead of a raw noise source.")
@click.option("--verbose", default=1, type=click.IntRange(0, 3),
              help="Verbosity level (0=quiet, 1=normal, 2=verbose, 3=very verbose).")
@click.option("--output", "output_path", default=None, help="Output file for JSON results.")
@click.option("--backend", "backend_spec", default=None, help="Estimator backend (name or module:attr).")
@click.option("--parallel", is_flag=True, help="Run independent estimators concurrently.")
def assess_cmd(file: str, iid: bool, non_iid: bool, bits: int, conditioned: bool, verbose: int,
               output_path: str | None, backend_spec: str | None, parallel: bool) -> None:
    """Assess the min-entropy of FILE (or stdin).

    Examples:

        ea-tool assess --non-iid --bits 8 data.bin

        ea-tool assess --iid --bits 1 data.bin --output result.json

        cat data.bin | ea-tool assess --non-iid --bits 8
    """
    from entropy_assessment.assess import assess
    from entropy_assessment.errors import BackendUnavailableError
    from entropy_assessment.estimators import load_backend
    from entropy_assessment.result import AssessmentMode, error_result

    if iid == non_iid:
        raise click.UsageError("must specify exactly one of --iid or --non-iid")
    if not 0 <= bits <= 8:
        raise click.UsageError(f"bits per symbol must be 0-8, got {bits}")
    mode = AssessmentMode.IID if iid else AssessmentMode.NON_IID

    filename, data = _read_input(file)

    try:
        backend = load_backend(backend_spec)
    except BackendUnavailableError as e:
        result = error_result(mode, e, initial_entropy=not conditioned, sample_size=len(data))
    else:
        result = assess(
            data,
            word_size=bits,
            mode=mode,
            initial_entropy=not conditioned,
            verbose=verbose,
            backend=backend,
            parallel=parallel,
        )

    out = {
        "version": __version__,
        "filename": filename,
        "bits_per_symbol": bits,
        "data_size": len(data),
        **result.to_dict(),
    }

    if not result.ok:
        if output_path:
            _write_json(output_path, out)
        else:
            click.echo(f"Error: {result.error_message}", err=True)
        sys.exit(1)

    if output_path:
        _write_json(output_path, out)
        if verbose > 0:
            click.echo(f"Results written to {output_path}")
    elif verbose >= 1:
        click.echo("\nEntropy Assessment Results:")
        click.echo(f"  Test Type:       {result.mode.value}")
        click.echo(f"  Source:          {'raw noise source' if result.initial_entropy else 'conditioned output'}")
        click.echo(f"  Bits/Symbol:     {result.word_size}")
        click.echo(f"  H_original:      {result.h_original:.6f}")
        click.echo(f"  H_bitstring:     {result.h_bitstring:.6f}")
        click.echo(f"  H_assessed:      {result.h_assessed:.6f}")
        click.echo(f"  Min Entropy:     {result.min_entropy:.6f}")
        if verbose >= 2:
            _print_estimators(result)


@main.command()
@click.argument("file", required=False, default="-")
@click.option("--bits", default=0, type=int, help="Bits per symbol (1-8), 0 for auto-detect.")
def prepare(file: str, bits: int) -> None:
    """Show how FILE is mapped into symbols, without running estimators."""
    from entropy_assessment.errors import AssessmentError
    from entropy_assessment.symbols import prepare_sample

    filename, data = _read_input(file)
    try:
        sample = prepare_sample(data, bits)
    except AssessmentError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    s = sample.summary()
    click.echo(f"Sample: {filename}")
    click.echo(f"  Bits/Symbol:     {s['word_size']}")
    click.echo(f"  Symbols:         {s['length']:,}")
    click.echo(f"  Alphabet size:   {s['alph_size']}")
    click.echo(f"  Max symbol:      {s['max_symbol']}")
    click.echo(f"  Bitstring:       {s['bit_length']:,} bits")
    click.echo(f"  Compacted:       {'yes' if s['compacted'] else 'no'}")
    if sample.alph_size <= 1:
        click.echo("  Warning: single-symbol alphabet, no entropy can be awarded.")


@main.command()
def backends() -> None:
    """List installed estimator backends."""
    from entropy_assessment.estimators import ENTRY_POINT_GROUP, available_backends

    names = available_backends()
    click.echo(f"Found {len(names)} estimator backend(s) in '{ENTRY_POINT_GROUP}':\n")
    for name in names:
        click.echo(f"  {name}")
    if not names:
        click.echo("  (none installed)")


# ────────────────────────────────────────────────────────────
# Report & Server
# ────────────────────────────────────────────────────────────


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--mode", type=click.Choice(["iid", "non-iid"]), default="non-iid", help="Assessment mode.")
@click.option("--bits", default=0, type=click.IntRange(0, 8), help="Bits per symbol, 0 for auto-detect.")
@click.option("--conditioned", is_flag=True, help="Assess conditioned output instead of a raw noise source.")
@click.option("--backend", "backend_spec", default=None, help="Estimator backend (name or module:attr).")
@click.option("--output", "output_path", default=None, help="Output path for report.")
def report(files: tuple[str, ...], mode: str, bits: int, conditioned: bool,
           backend_spec: str | None, output_path: str | None) -> None:
    """Assess several samples and write a Markdown report."""
    from datetime import datetime

    from entropy_assessment.assess import assess_file
    from entropy_assessment.errors import BackendUnavailableError
    from entropy_assessment.estimators import load_backend
    from entropy_assessment.report import generate_report

    try:
        backend = load_backend(backend_spec)
    except BackendUnavailableError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Assessing {len(files)} sample(s) ({mode})...\n")
    results = {}
    for path in files:
        result = assess_file(path, bits, mode, initial_entropy=not conditioned, backend=backend)
        status = f"{result.min_entropy:.6f}" if result.ok else f"error: {result.error_message}"
        click.echo(f"  {Path(path).name:<30} {status}")
        results[path] = result

    if output_path is None:
        output_path = f"entropy_report_{datetime.now():%Y-%m-%d}.md"
    generate_report(results, output_path)
    click.echo(f"\nReport saved to: {output_path}")


@main.command()
@click.option("--port", default=None, type=int, help="Port to listen on.")
@click.option("--host", default=None, help="Bind address.")
@click.option("--backend", "backend_spec", default=None, help="Estimator backend (name or module:attr).")
def server(port: int | None, host: str | None, backend_spec: str | None) -> None:
    """Start the HTTP assessment service.

    Endpoints:

        POST /api/v1/assess?mode=iid|non-iid&bits=N&conditioned=0|1

        GET /health

        GET /metrics

    Defaults come from EA_* environment variables.
    """
    from entropy_assessment.config import load_settings
    from entropy_assessment.errors import BackendUnavailableError, ConfigError
    from entropy_assessment.estimators import load_backend
    from entropy_assessment.http_server import run_server

    overrides = {k: v for k, v in (("server_port", port), ("server_host", host), ("backend", backend_spec))
                 if v is not None}
    try:
        settings = load_settings(**overrides)
    except ConfigError as e:
        click.echo(f"Error: invalid configuration: {e}", err=True)
        sys.exit(2)
    configure_logging(settings.log_level)

    try:
        backend = load_backend(settings.backend)
    except BackendUnavailableError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"SP 800-90B Assessment Server v{__version__}")
    click.echo(f"   Listening on http://{settings.server_host}:{settings.server_port}")
    click.echo(f"   Backend: {backend!r}")
    click.echo()
    run_server(settings, backend)


# ────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────


def _read_input(file: str) -> tuple[str, bytes]:
    """Read a sample from *file*, or stdin for ``-``."""
    if file == "-":
        return "stdin", click.get_binary_stream("stdin").read()
    try:
        return file, Path(file).read_bytes()
    except OSError as e:
        click.echo(f"Error reading file {file}: {e}", err=True)
        sys.exit(1)


def _write_json(path: str, data: dict) -> None:
    try:
        Path(path).write_text(json.dumps(data, indent=2) + "\n")
    except OSError as e:
        click.echo(f"Error writing JSON: {e}", err=True)
        sys.exit(1)


def _print_estimators(result) -> None:
    table = Table(title="Estimators", show_lines=False)
    table.add_column("Estimator")
    table.add_column("Estimate", justify="right")
    table.add_column("Result", justify="center")
    for est in result.estimators:
        estimate = f"{est.entropy_estimate:.6f}" if est.is_entropy_valid else "N/A"
        table.add_row(est.name, estimate, "[green]pass[/]" if est.passed else "[red]fail[/]")
    Console().print(table)
