"""
Command-line interface for glaciersim.

Usage:
    glaciersim list
    glaciersim info titanus
    glaciersim run --glacier equinox --global-temp 2.5 --years 200
    glaciersim run --glacier fortress --schedule ./schedule.csv --outputs csv png
    glaciersim run --glacier titanus --realtime --interval 0.5
    glaciersim sweep --glacier equinox --factor global_temp --min -2 --max 5
    glaciersim score 10 50000 80 500
"""

import asyncio
import sys
from pathlib import Path
import click

from glaciersim import __version__, GlacierModel, SimulationController, GLACIERS, get_glacier
from glaciersim.core.scoring import score as compute_score, grade as compute_grade
from glaciersim.core.state import ENVIRONMENT_RANGES, Glacier
from glaciersim.io.inputs import load_glaciers_csv, load_schedule_csv
from glaciersim.io.leaderboard import Leaderboard
from glaciersim.utils.logging import (
    setup_logging,
    start_step,
    end_step,
    log_error,
    get_timing_logger,
)
from glaciersim.utils.config import load_config


def _resolve_glacier(key: str, glacier_file) -> Glacier:
    """Look up a glacier in the custom file first, then the built-ins."""
    if glacier_file:
        custom = load_glaciers_csv(glacier_file)
        if key.lower() in custom:
            return custom[key.lower()]
    return get_glacier(key)


def _environment_options(f):
    """Shared environment factor options."""
    for name, (low, high) in reversed(list(ENVIRONMENT_RANGES.items())):
        f = click.option(
            f"--{name.replace('_', '-')}",
            name,
            type=click.FloatRange(low, high),
            default=None,
            help=f"{name} in [{low}, {high}] (default: from config)",
        )(f)
    return f


def _environment_from(config, overrides) -> dict:
    env = dict(config["environment"])
    env.update({k: v for k, v in overrides.items() if v is not None})
    return env


@click.group()
@click.version_option(version=__version__, prog_name="glaciersim")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.option("--config", type=click.Path(), help="Config file path")
@click.pass_context
def main(ctx, verbose, debug, config):
    """
    glaciersim - Interactive Glacier Survival Toy Model

    Pick a glacier, set the environment, and watch its thickness, area
    and stability evolve one simulated year per tick until it collapses
    or survives.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config)
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug


@main.command("list")
@click.pass_context
def list_glaciers(ctx):
    """List available glaciers."""
    config = ctx.obj["config"]
    glaciers = dict(GLACIERS)
    if config.get("glacier_file"):
        glaciers.update(load_glaciers_csv(config["glacier_file"]))

    click.echo("\nAvailable Glaciers:")
    click.echo("─" * 70)

    for key, glacier in glaciers.items():
        click.echo(f"\n  {key}:")
        click.echo(f"    Name: {glacier.name}")
        click.echo(f"    Thickness: {glacier.initial_thickness:g} m")
        click.echo(f"    Area: {glacier.initial_area:g} km²")
        click.echo(f"    Stability: {glacier.initial_stability:g}%")
        click.echo(f"    Sensitivity: {glacier.temperature_sensitivity:g}/10")

    click.echo("\n" + "─" * 70)
    click.echo("\nTo play one:")
    click.echo("  glaciersim run --glacier equinox --global-temp 1.5")
    click.echo()


@main.command("info")
@click.argument("glacier")
@click.pass_context
def info(ctx, glacier):
    """Show detailed information about a glacier."""
    try:
        g = _resolve_glacier(glacier, ctx.obj["config"].get("glacier_file"))
    except KeyError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"\n{g.name}")
    click.echo("=" * 60)
    if g.description:
        click.echo(g.description)
    click.echo(f"\nInitial State:")
    click.echo(f"  Thickness: {g.initial_thickness:g} m")
    click.echo(f"  Area: {g.initial_area:g} km²")
    click.echo(f"  Volume: {g.initial_thickness * g.initial_area:,.0f}")
    click.echo(f"  Stability: {g.initial_stability:g}%")
    click.echo(f"  Temperature sensitivity: {g.temperature_sensitivity:g}/10")
    click.echo(f"  Area retreat below: {g.initial_thickness * 0.5:g} m")
    click.echo()


async def _play_realtime(controller: SimulationController, schedule=None) -> None:
    """Run on the controller's own clock, polling several times per tick."""
    if controller.tick_interval is None:
        raise ValueError("Real-time play needs a tick interval")
    schedule = schedule or {}
    poll = controller.tick_interval / 4
    last_year = None
    controller.start()
    while True:
        record = controller.record
        if record.year != last_year:
            last_year = record.year
            for key, value in schedule.get(record.year, {}).items():
                controller.set_environment_factor(key, value)
            s = controller.state
            click.echo(
                f"  {record.year}  thickness={s.thickness:8.1f} m  area={s.area:7.1f} km²  "
                f"stability={s.stability:5.1f}  health={record.health:5.1f}"
            )
        if not controller.clock_active:
            break
        await asyncio.sleep(poll)
    await controller.wait()


@main.command("run")
@click.option("--glacier", "-g", type=str, default=None, help="Glacier to play (default: from config)")
@click.option("--glacier-file", type=click.Path(exists=True), help="CSV file with custom glaciers")
@_environment_options
@click.option("--years", "-y", type=click.IntRange(min=1), default=None, help="Maximum years to simulate")
@click.option("--max-years", type=click.IntRange(min=1), default=None,
              help="Count the session as survived after this many years")
@click.option("--schedule", type=click.Path(exists=True), help="CSV environment schedule (year, factors...)")
@click.option("--realtime", is_flag=True, help="Tick on a wall clock instead of as fast as possible")
@click.option("--interval", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Seconds per year in real-time mode (default: from config)")
@click.option("--output-dir", "-o", type=click.Path(), default=None, help="Output directory")
@click.option("--outputs", type=click.Choice(["csv", "png"]), multiple=True,
              help="Output formats (default: from config)")
@click.option("--leaderboard", type=click.Path(), default=None, help="Leaderboard CSV to append the result to")
@click.option("--log-dir", type=click.Path(), default=None, help="Log directory")
@click.option("--experiment-name", "-e", type=str, default=None, help="Experiment name for log file")
@click.pass_context
def run(ctx, glacier, glacier_file, global_temp, snowfall, emissions, ocean_temp, years,
        max_years, schedule, realtime, interval, output_dir, outputs, leaderboard, log_dir,
        experiment_name):
    """Play one glacier session and report the score."""
    import traceback

    config = ctx.obj["config"]
    debug = ctx.obj.get("debug", False)
    verbose = ctx.obj.get("verbose", False)

    glacier = glacier or config["scenarios"]["default"]
    glacier_file = glacier_file or config.get("glacier_file")
    years = years or config["simulation"]["default_years"]
    output_dir = Path(output_dir or config["outputs"]["base_dir"])
    outputs = list(outputs) if outputs else list(config["outputs"]["formats"])
    log_dir = log_dir or config["logging"]["log_dir"]
    experiment_name = experiment_name or glacier

    tick_interval = interval if interval is not None else config["simulation"]["tick_interval"]
    if realtime and tick_interval is None:
        raise click.UsageError(
            "--realtime needs a tick interval: pass --interval or set simulation.tick_interval"
        )

    level = "DEBUG" if debug else ("INFO" if verbose else config["logging"]["level"])
    logger = setup_logging(
        level=level,
        log_dir=log_dir,
        experiment_name=experiment_name,
        format_style=config["logging"]["format_style"],
    )

    try:
        start_step("Load inputs")
        g = _resolve_glacier(glacier, glacier_file)
        env = _environment_from(config, {
            "global_temp": global_temp,
            "snowfall": snowfall,
            "emissions": emissions,
            "ocean_temp": ocean_temp,
        })
        sched = load_schedule_csv(schedule) if schedule else None
        end_step(success=True)

        click.echo(f"\n{'═' * 60}")
        click.echo(f"  {g.name}")
        click.echo(f"{'─' * 60}")
        for key, value in env.items():
            click.echo(f"  {key:<12} = {value:+.2f}")
        click.echo(f"{'═' * 60}")

        if realtime:
            sim = dict(config["simulation"])
            sim["tick_interval"] = tick_interval
            # The clock stops itself at the tick budget
            sim["max_years"] = years if max_years is None else min(years, max_years)
            controller = SimulationController.from_config({"simulation": sim})
            controller.initialize(g)
            for key, value in env.items():
                controller.set_environment_factor(key, value)
            asyncio.run(_play_realtime(controller, sched))
            summary = controller.summary()
        else:
            model = GlacierModel.from_config(config)
            if max_years is not None:
                model.params["max_years"] = max_years
            results = model.run(g, environment=env, schedule=sched, years=years)
            summary = results.terminal_summary

            start_step("Generate outputs")
            if "csv" in outputs:
                csv_path = output_dir / "csv" / f"{experiment_name}_data.csv"
                results.to_csv(csv_path)
                click.echo(f"    ✓ CSV: {csv_path}")
            if "png" in outputs:
                png_path = output_dir / "png" / f"{experiment_name}_timeseries.png"
                results.to_png(png_path, dpi=config["visualization"]["timeseries_dpi"])
                click.echo(f"    ✓ PNG: {png_path}")
            end_step(success=True)

        click.echo(f"\n  Results Summary:")
        click.echo(f"    Outcome: {summary.outcome}")
        click.echo(f"    Final year: {summary.year} ({summary.years_survived} years)")
        click.echo(f"    Final thickness: {summary.final_thickness:.1f} m")
        click.echo(f"    Final stability: {summary.final_stability:.0f}%")
        click.echo(f"    Final volume: {summary.final_volume:,.0f}")
        click.echo(f"    Score: {summary.score} (grade {summary.grade})")

        if leaderboard:
            path = Path(leaderboard)
            board = Leaderboard.from_csv(path) if path.exists() else Leaderboard()
            board.submit(summary)
            board.to_csv(path)
            click.echo(f"    Leaderboard: {path}")

        timing_logger = get_timing_logger()
        if timing_logger and (verbose or debug):
            click.echo(timing_logger.get_summary())
        click.echo()

    except Exception as e:
        log_error(e, "Main execution")
        click.echo(f"\n{'!' * 70}", err=True)
        click.echo(f"  FATAL ERROR: {e}", err=True)
        click.echo(f"{'!' * 70}", err=True)
        click.echo(f"\nCheck log file in: {log_dir}", err=True)
        if debug:
            click.echo(traceback.format_exc(), err=True)
        logger.debug("Exiting with status 1")
        sys.exit(1)


@main.command("sweep")
@click.option("--glacier", "-g", type=str, required=True, help="Glacier to analyze")
@click.option("--factor", "-f", type=click.Choice(list(ENVIRONMENT_RANGES)), required=True,
              help="Environment factor to vary")
@click.option("--min", "vmin", type=float, default=None, help="Minimum value (default: range minimum)")
@click.option("--max", "vmax", type=float, default=None, help="Maximum value (default: range maximum)")
@click.option("--n-samples", type=click.IntRange(min=2), default=11, help="Number of values to test")
@click.option("--years", "-y", type=click.IntRange(min=1), default=None, help="Maximum years per run")
@click.option("--output-dir", "-o", type=click.Path(), default="./sweeps", help="Output directory")
@click.option("--log-dir", type=click.Path(), default=None, help="Log directory")
@click.pass_context
def sweep(ctx, glacier, factor, vmin, vmax, n_samples, years, output_dir, log_dir):
    """Run one session per value of an environment factor."""
    import numpy as np
    import pandas as pd
    import traceback

    config = ctx.obj["config"]
    log_dir = log_dir or config["logging"]["log_dir"]
    years = years or config["simulation"]["default_years"]

    low, high = ENVIRONMENT_RANGES[factor]
    vmin = low if vmin is None else vmin
    vmax = high if vmax is None else vmax
    for hint, value in (("--min", vmin), ("--max", vmax)):
        if not low <= value <= high:
            raise click.BadParameter(
                f"{value:g} is outside the {factor} range [{low:g}, {high:g}]",
                param_hint=hint,
            )

    setup_logging(
        level="DEBUG" if ctx.obj.get("debug") else "INFO",
        log_dir=log_dir,
        experiment_name=f"sweep_{glacier}_{factor}",
        format_style=config["logging"]["format_style"],
    )

    try:
        values = np.linspace(vmin, vmax, n_samples)

        g = _resolve_glacier(glacier, config.get("glacier_file"))
        model = GlacierModel.from_config(config)

        click.echo(f"\nSweep: {g.name}, {factor} in [{values[0]:.2f}, {values[-1]:.2f}]")
        click.echo("─" * 50)

        results_list = model.sweep(
            g, factor, values,
            environment=config["environment"],
            years=years,
        )

        rows = []
        for value, results in results_list:
            if results is None:
                rows.append({factor: value, "outcome": None, "years": np.nan,
                             "final_thickness": np.nan, "score": np.nan, "grade": None})
                continue
            s = results.summary()
            rows.append({
                factor: value,
                "outcome": s["outcome"],
                "years": s["years_survived"],
                "final_thickness": s["final_thickness"],
                "score": s["score"],
                "grade": s["grade"],
            })

        df = pd.DataFrame(rows)

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        csv_path = output_dir / f"{glacier}_{factor}_sweep.csv"
        df.to_csv(csv_path, index=False)

        click.echo("\nResults:")
        click.echo(df.to_string(index=False))
        click.echo(f"\nResults saved to: {csv_path}")

        collapsed = df[df["outcome"] == "collapsed"]
        if 0 < len(collapsed) < len(df):
            click.echo(f"\nFirst collapsing {factor}: {collapsed[factor].iloc[0]:.2f}")
        click.echo()

    except Exception as e:
        log_error(e, "Sweep")
        click.echo(f"\nFATAL ERROR: {e}", err=True)
        click.echo(f"Check log file in: {log_dir}", err=True)
        click.echo(traceback.format_exc(), err=True)
        sys.exit(1)


@main.command("score")
@click.argument("years_survived", type=int)
@click.argument("final_volume", type=float)
@click.argument("final_stability", type=float)
@click.argument("final_thickness", type=float)
def score(years_survived, final_volume, final_stability, final_thickness):
    """Score a finished session from its final readings."""
    points = compute_score(years_survived, final_volume, final_stability, final_thickness)
    click.echo(f"Score: {points}  Grade: {compute_grade(points)}")


if __name__ == "__main__":
    main()
