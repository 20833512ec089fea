"""Typer CLI entrypoint for the tick forwarder."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import typer
import yaml
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, ForwarderConfig, SinkKind
from .engine import TickFileTailer, serial_to_unix_ms
from .logging_conf import configure_logging, default_log_path, tail_log
from .orchestrator import Exporter, ExporterFactory, PollSummary
from .scheduler import APSchedulerAdapter

app = typer.Typer(
    help="Forward time & sales ticks to a JSON lines file or a local TCP peer.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Inspect or initialise the forwarder configuration.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Inspect forwarder logs.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    verbose: bool = False


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    configure_logging(verbose=verbose)
    return AppState(repository=repository, verbose=verbose)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _load_config(state: AppState, config_file: Optional[Path]) -> ForwarderConfig:
    try:
        if config_file is not None:
            return state.repository.resolved(state.repository.load_file(config_file))
        return state.repository.resolved()
    except (FileNotFoundError, ValueError, ValidationError, yaml.YAMLError) as exc:
        console.print(f"Invalid configuration: {exc}", style="red")
        raise typer.Exit(code=1)


def _apply_overrides(
    config: ForwarderConfig,
    sink: Optional[SinkKind],
    feed: Optional[Path],
    symbol: Optional[str],
    interval: Optional[float],
    enable: bool,
) -> ForwarderConfig:
    update: dict[str, object] = {}
    if enable:
        update["enabled"] = True
    if sink is not None:
        update["sink"] = sink
    if feed is not None or symbol is not None:
        update["feed"] = config.feed.model_copy(
            update={
                "path": feed.resolve() if feed is not None else config.feed.path,
                "symbol": symbol if symbol is not None else config.feed.symbol,
            }
        )
    if interval is not None:
        if interval <= 0:
            raise typer.BadParameter("--interval must be > 0")
        update["poll"] = config.poll.model_copy(update={"interval_seconds": interval})
    return config.model_copy(update=update) if update else config


def _render_config_table(config: ForwarderConfig) -> Table:
    table = Table(title="Forwarder configuration", box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="green", overflow="fold")
    table.add_row("enabled", str(config.enabled))
    table.add_row("sink", config.sink.value)
    table.add_row("file.path", str(config.file.path))
    table.add_row("file.max_size_kb", str(config.file.max_size_kb))
    table.add_row("socket", f"{config.socket.host}:{config.socket.port}")
    table.add_row("feed.path", str(config.feed.path or "-"))
    table.add_row("feed.symbol", config.feed.symbol or "-")
    table.add_row("poll.interval_seconds", f"{config.poll.interval_seconds:g}")
    table.add_row("log_every", str(config.log_every))
    return table


def _render_poll_table(summaries: Sequence[PollSummary], exporter: Exporter) -> Table:
    table = Table(title=f"Poll results · {exporter.sink.describe()}", box=box.SIMPLE_HEAD)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Snapshot", justify="right")
    table.add_column("Examined", justify="right")
    table.add_column("Delivered", style="green", justify="right")
    table.add_column("Filtered", justify="right")
    table.add_column("Skipped", style="yellow", justify="right")
    table.add_column("Failed", style="red", justify="right")
    table.add_column("Sink state", style="magenta")
    for index, summary in enumerate(summaries, start=1):
        table.add_row(
            str(index),
            str(summary.snapshot_size),
            str(summary.examined),
            str(summary.delivered),
            str(summary.filtered),
            str(summary.skipped),
            str(summary.failed),
            summary.sink_state,
        )
    table.add_section()
    table.add_row(
        "Total",
        "",
        str(sum(s.examined for s in summaries)),
        str(exporter.total_delivered),
        str(sum(s.filtered for s in summaries)),
        str(sum(s.skipped for s in summaries)),
        str(sum(s.failed for s in summaries)),
        "",
    )
    return table


app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")


@app.callback()
def main(
    ctx: typer.Context, verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.")
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Poll the feed on the configured cadence until interrupted.")
def run(
    ctx: typer.Context,
    sink: Optional[SinkKind] = typer.Option(None, "--sink", help="Override the configured sink."),
    feed: Optional[Path] = typer.Option(None, "--feed", help="Replay file used as the feed."),
    symbol: Optional[str] = typer.Option(None, "--symbol", help="Symbol written to each tick."),
    interval: Optional[float] = typer.Option(None, "--interval", help="Seconds between polls."),
    enable: bool = typer.Option(False, "--enable", help="Export even if the config is disabled."),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Explicit config file."),
) -> None:
    state = _get_state(ctx)
    config = _apply_overrides(_load_config(state, config_file), sink, feed, symbol, interval, enable)
    if not config.enabled:
        console.print("Export is disabled; set `enabled: true` or pass --enable.", style="yellow")
        raise typer.Exit(code=0)
    if config.feed.path is None:
        console.print("No feed configured; pass --feed or set feed.path.", style="red")
        raise typer.Exit(code=1)

    exporter = ExporterFactory.build(config)
    scheduler = APSchedulerAdapter(blocking=True)
    scheduler.schedule_exporter(exporter.poll, config.poll)
    console.print(
        f"Forwarding {config.feed.path} → {exporter.sink.describe()} "
        f"every {config.poll.interval_seconds:g}s (Ctrl+C to stop)",
        style="cyan",
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        scheduler.shutdown()
        exporter.close()
    console.print(f"Stopped after {exporter.total_delivered} delivered ticks.", style="green")


@app.command("poll", help="Run the exporter a fixed number of times and report.")
def poll(
    ctx: typer.Context,
    sink: Optional[SinkKind] = typer.Option(None, "--sink", help="Override the configured sink."),
    feed: Optional[Path] = typer.Option(None, "--feed", help="Replay file used as the feed."),
    symbol: Optional[str] = typer.Option(None, "--symbol", help="Symbol written to each tick."),
    times: int = typer.Option(1, "--times", min=1, help="Number of consecutive invocations."),
    enable: bool = typer.Option(False, "--enable", help="Export even if the config is disabled."),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Explicit config file."),
) -> None:
    state = _get_state(ctx)
    config = _apply_overrides(_load_config(state, config_file), sink, feed, symbol, None, enable)
    exporter = ExporterFactory.build(config)
    try:
        summaries = [exporter.poll() for _ in range(times)]
    finally:
        exporter.close()
    if not config.enabled:
        console.print("Export is disabled; nothing was forwarded.", style="yellow")
    console.print(_render_poll_table(summaries, exporter))


@app.command("timestamp", help="Convert a serial date-time to Unix epoch milliseconds.")
def timestamp(
    serial: float = typer.Argument(..., help="Serial date-time (25569.0 = 1970-01-01)."),
    ms: int = typer.Option(0, "--ms", help="Millisecond-of-second component."),
) -> None:
    console.print(str(serial_to_unix_ms(serial, ms)))


@app.command("tail", help="Read ticks from an exported file and report sequence gaps.")
def tail(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(None, help="Tick file (defaults to the configured one)."),
    from_start: bool = typer.Option(True, "--from-start/--from-end", help="Where reading begins."),
    limit: int = typer.Option(20, "--limit", min=1, help="Show at most the last N ticks."),
) -> None:
    state = _get_state(ctx)
    target = path or _load_config(state, None).file.path
    if not target.exists():
        console.print(f"Tick file not found: {target}", style="yellow")
        raise typer.Exit(code=1)
    tailer = TickFileTailer(target, from_start=from_start)
    records = tailer.read_new()
    table = Table(title=f"{target.name} · {len(records)} ticks", box=box.SIMPLE_HEAD)
    for column in ("seq", "ts", "price", "volume", "side", "symbol"):
        table.add_column(column)
    for record in records[-limit:]:
        table.add_row(
            str(record.seq),
            str(record.ts),
            f"{record.price:.2f}",
            str(record.volume),
            record.side,
            record.symbol,
        )
    console.print(table)
    for previous, current in tailer.gaps:
        console.print(f"Gap: {previous} → {current} ({current - previous - 1} missed)", style="yellow")
    if tailer.invalid_lines:
        console.print(f"Skipped {tailer.invalid_lines} invalid lines.", style="red")


@config_app.command("show", help="Print the effective configuration.")
def config_show(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(None, "--config", help="Explicit config file."),
) -> None:
    state = _get_state(ctx)
    console.print(_render_config_table(_load_config(state, config_file)))


@config_app.command("init", help="Write the default configuration file.")
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    state = _get_state(ctx)
    path = state.repository.locator.config_path()
    if path.exists() and not force:
        console.print(f"Configuration already exists: {path}", style="yellow")
        raise typer.Exit(code=1)
    state.repository.save_config(ForwarderConfig())
    console.print(f"Configuration written to {path}", style="green")


@log_app.command("show", help="Show the most recent forwarder log lines.")
def log_show(tail_count: int = typer.Option(100, "--tail", help="Number of lines.")) -> None:
    lines = tail_log(default_log_path(), tail_count)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"Forwarder log · last {len(lines)} lines", style="cyan")
    console.print("".join(lines), markup=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
