"""CLI for the IP Risk Scorer.

Provides command-line interface for scoring provider output for an image
and inspecting the scoring configuration.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import (
    ConfigError,
    config_search_paths,
    find_config_file,
    get_config,
    load_config,
    save_default_config,
)
from .engine import PayloadError, RiskEngine, validate_payload
from .mock_provider import MockVisionProvider
from .schema import AnalysisResult, RiskCategory, RiskTier

console = Console()

TIER_COLORS = {
    RiskTier.LOW: "green",
    RiskTier.MEDIUM: "yellow",
    RiskTier.HIGH: "red",
}


@click.group()
@click.version_option(version="1.0.0", prog_name="ip-risk-scorer")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a risk-config.yaml (default: search standard locations)"
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level for pipeline diagnostics"
)
def main(config_path: Optional[str], log_level: str):
    """IP Risk Scoring Engine.

    Combines per-category provider signals for an image into a weighted
    overall IP risk score and a LOW / MEDIUM / HIGH tier.
    """
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    path = Path(config_path) if config_path else find_config_file()
    if path:
        try:
            load_config(path)
        except ConfigError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            sys.exit(1)


@main.command("score")
@click.option(
    "--input", "-i", "input_file",
    required=True,
    type=click.Path(exists=True),
    help="Provider payload: numeric scores or insight JSON, or free-text answer (.txt)"
)
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Output file for JSON results"
)
@click.option(
    "--workers", "-w",
    type=int,
    default=None,
    help="Run the rule-based analyzers on this many threads"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show per-category breakdown"
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
def score_cmd(input_file: str, out: Optional[str], workers: Optional[int], verbose: bool, json_output: bool):
    """Score a provider payload for one image.

    Examples:
        ip-risk-scorer score -i scores.json
        ip-risk-scorer score -i insight.json -v
        ip-risk-scorer score -i answer.txt -j -o result.json
    """
    try:
        engine = RiskEngine(get_config())
        result = engine.score_file(input_file, max_workers=workers)
    except PayloadError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    emit_result(engine, result, out, verbose, json_output)


@main.command("mock")
@click.argument("image_ref")
@click.option(
    "--mode", "-m",
    type=click.Choice(["scores", "insight"]),
    default="scores",
    help="Use the mock provider's numeric scores or its qualitative insight"
)
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Output file for JSON results"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show per-category breakdown"
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
def mock_cmd(image_ref: str, mode: str, out: Optional[str], verbose: bool, json_output: bool):
    """Run the full pipeline against the deterministic mock provider.

    IMAGE_REF is any image path or URL; the same reference always yields
    the same result.

    Examples:
        ip-risk-scorer mock uploads/banner.png
        ip-risk-scorer mock https://example.com/a.png --mode insight -v
    """
    provider = MockVisionProvider()
    engine = RiskEngine(get_config())

    if mode == "insight":
        result = engine.score_insight(provider.analyze_image(image_ref))
    else:
        result = engine.score_provider_scores(provider.analyze_image_scores(image_ref))

    emit_result(engine, result, out, verbose, json_output)


@main.command("validate")
@click.option(
    "--input", "-i", "input_file",
    required=True,
    type=click.Path(),
    help="Provider payload to check"
)
def validate_cmd(input_file: str):
    """Validate a provider payload without scoring it.

    Values the validator would repair are listed as warnings.
    """
    is_valid, issues = validate_payload(input_file)
    if is_valid:
        console.print(f"[green]✓ Payload valid: {input_file}[/green]")
        for issue in issues:
            console.print(f"  [yellow]•[/yellow] {issue}")
    else:
        console.print(f"[red]✗ Payload invalid: {input_file}[/red]")
        for issue in issues:
            console.print(f"  - {issue}")

    sys.exit(0 if is_valid else 1)


@main.command("weights")
def weights_cmd():
    """Show the active category weights and tier thresholds."""
    config = get_config()
    engine = RiskEngine(config)

    table = Table(title="Category Weights")
    table.add_column("Category", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Share", justify="right")

    total = engine.weights.total()
    for category in RiskCategory:
        weight = engine.weights.weight_for(category)
        share = f"{weight / total:.0%}" if total > 0 else "-"
        table.add_row(category.value, f"{weight:.2f}", share)
    table.add_row("[dim](unknown)[/dim]", f"[dim]{engine.weights.fallback:.2f}[/dim]", "")

    console.print(table)
    thresholds = config.tier_thresholds
    console.print(
        f"\nTiers: [green]LOW[/green] < {thresholds.medium} <= "
        f"[yellow]MEDIUM[/yellow] < {thresholds.high} <= [red]HIGH[/red]"
    )


@main.command("init-config")
@click.option(
    "--out", "-o",
    type=click.Path(),
    default="risk-config.yaml",
    help="Output path for the configuration file"
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing config file"
)
def init_config_cmd(out: str, force: bool):
    """Generate a default scorer configuration file.

    Example:
        ip-risk-scorer init-config --out my-config.yaml
    """
    out_path = Path(out)
    if out_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists: {out}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        save_default_config(out_path)
    except OSError as e:
        console.print(f"[red]Error creating config:[/red] {e}")
        sys.exit(1)

    console.print(f"[green]✓[/green] Config file created: {out}")
    console.print("\nThis file configures:")
    console.print("  • category_weights - How much each category contributes to the overall score")
    console.print("  • tier_thresholds - Where LOW / MEDIUM / HIGH begin")
    console.print("  • validator_defaults - Values used for invalid provider scores")
    console.print("  • insight_parsing - Limits for qualitative signal lists")
    console.print("\nThe scorer will look for config in this order:")
    console.print("  1. --config PATH option")
    for i, (label, _) in enumerate(config_search_paths(), start=2):
        console.print(f"  {i}. {label}")


def emit_result(
    engine: RiskEngine,
    result: AnalysisResult,
    out: Optional[str],
    verbose: bool,
    json_output: bool,
):
    """Print a result as text or JSON and optionally save it."""
    if json_output:
        output_json(result, out)
        return

    display_result(engine, result, verbose)
    if out:
        output_json(result, out)
        console.print(f"\n[green]Results saved to {out}[/green]")


def display_result(engine: RiskEngine, result: AnalysisResult, verbose: bool):
    """Display an analysis result in formatted text."""
    color = TIER_COLORS.get(result.risk_tier, "white")

    console.print(Panel(
        f"Overall Score: [bold]{result.overall_score}[/bold] / 100\n"
        f"Risk Tier: [bold {color}]{result.risk_tier.value}[/bold {color}]\n"
        f"Categories: {len(result.results)}",
        title="IP Risk Analysis",
    ))

    if not result.results:
        return

    table = Table(show_header=True)
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Confidence", justify="right")
    if verbose:
        table.add_column("Weight", justify="right")
        table.add_column("Contribution", justify="right")

    contributions = engine.explain(result) if verbose else []
    for i, r in enumerate(result.results):
        row = [r.category_name, str(r.score), f"{r.confidence:.2f}"]
        if verbose:
            c = contributions[i]
            row += [f"{c.weight:.2f}", f"{c.weighted_score:.2f}"]
        table.add_row(*row)
    console.print(table)

    if verbose:
        explained = [r for r in result.results if r.explanation]
        if explained:
            console.print("\n[bold]Explanations:[/bold]")
            for r in explained:
                console.print(f"  [cyan]{r.category_name}[/cyan]: {r.explanation}")


def output_json(result: AnalysisResult, out_path: Optional[str]):
    """Output result as JSON."""
    json_str = result.model_dump_json(by_alias=True, indent=2)

    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(json_str)
    else:
        print(json_str)


if __name__ == "__main__":
    main()
