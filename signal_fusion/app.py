# signal_fusion/app.py
from __future__ import annotations
import asyncio
import json
import logging
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
import typer
from .calibration import build_calibrator
from .config import PipelineConfig, settings
from .conformal import ConformalGate
from .data.base import CandleProvider
from .data.csv_provider import CsvProvider
from .data.mock_provider import MockProvider
from .features import FEATURE_NAMES, build_features
from .pipeline import CycleResult, Pipeline
from .strategies import create_strategy, list_strategies
from .types import TIMEFRAMES, Candle, Timeframe

cli = typer.Typer(help="Multi-timeframe signal fusion advisor (educational).")


@cli.callback()
def main(log_level: str = typer.Option(settings.log_level, help="DEBUG | INFO | WARNING")):
    logging.basicConfig(
        level=log_level.upper(), format="%(message)s", datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _timeframe(value: str) -> Timeframe:
    if value not in TIMEFRAMES:
        raise typer.BadParameter(f"timeframe must be one of {', '.join(TIMEFRAMES)}")
    return value  # type: ignore[return-value]


def _provider(data_dir: str | None, seed: int) -> CandleProvider:
    return CsvProvider(data_dir) if data_dir else MockProvider(seed=seed)


async def _load(mdp: CandleProvider, symbol: str, limit: int) -> dict[Timeframe, list[Candle]]:
    try:
        batches = await asyncio.gather(*(mdp.get_recent_candles(symbol, tf, limit=limit) for tf in TIMEFRAMES))
    finally:
        await mdp.close()
    return dict(zip(TIMEFRAMES, batches))


# ============== ADVISE ==============

@cli.command()
def advise(
    symbol: str = typer.Option(settings.default_symbol, help="Ex: EURUSD"),
    mode: str = typer.Option(settings.mode, help="normal | precision"),
    limit: int = typer.Option(300, help="Candles per timeframe"),
    data_dir: str = typer.Option(None, help="Folder with SYMBOL_<tf>.csv files (mock data otherwise)"),
    seed: int = typer.Option(42, help="Mock data seed"),
    parallel: bool = typer.Option(False, help="Evaluate timeframes on a thread pool"),
    regime: bool = typer.Option(False, help="Scale weights by detected market regime"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
):
    """Runs the full pipeline on 5m/1h/4h candles and prints the decision."""
    if mode not in ("normal", "precision"):
        raise typer.BadParameter("mode must be normal or precision")
    candles = asyncio.run(_load(_provider(data_dir, seed), symbol, limit))
    cfg = PipelineConfig.from_settings(mode=mode, parallel=parallel, regime_weighting=regime)
    result = Pipeline(cfg).run(candles, mode=mode)

    if json_out:
        typer.echo(json.dumps(_as_dict(symbol, mode, result), ensure_ascii=False, indent=2))
        return
    _print_result(symbol, result)


def _as_dict(symbol: str, mode: str, result: CycleResult) -> dict:
    return {
        "symbol": symbol,
        "mode": mode,
        "direction": result.decision.direction,
        "confidence": round(result.decision.confidence, 4),
        "notes": list(result.decision.notes),
        "frames": [
            {
                "timeframe": r.frame.timeframe,
                "direction": r.frame.direction,
                "probability": round(r.frame.probability, 4),
                "uncertainty": round(r.frame.uncertainty, 4),
                "gate_pass": r.frame.gate_pass,
                "ensemble_reason": r.ensemble.reason,
                "regime": r.regime.value if r.regime else None,
            }
            for r in result.reports.values()
        ],
    }


def _print_result(symbol: str, result: CycleResult) -> None:
    for tf, report in result.reports.items():
        table = Table(title=f"{symbol} / {tf} signals", show_lines=False)
        table.add_column("Strategy"); table.add_column("Dir"); table.add_column("Conf"); table.add_column("Reason")
        for sg in report.signals:
            table.add_row(sg.strategy_id.value, sg.direction, f"{sg.confidence:.2f}", sg.reason[:70])
        print(table)

    frames = Table(title="Per-timeframe", show_lines=True)
    for col in ("TF", "Dir", "P(cal)", "Uncert.", "Interval", "Gate", "Ensemble"):
        frames.add_column(col)
    for tf, r in result.reports.items():
        lo, hi = r.uncertainty.interval
        frames.add_row(
            tf, r.frame.direction, f"{r.frame.probability:.3f}", f"{r.frame.uncertainty:.3f}",
            f"[{lo:.2f}, {hi:.2f}]", "pass" if r.frame.gate_pass else "fail", r.ensemble.reason[:50],
        )
    print(frames)

    d = result.decision
    print("\n[bold magenta]Decision[/]")
    print(f"Direction: [bold]{d.direction.upper()}[/]  |  Confidence: [bold]{d.confidence:.2f}[/]")
    for note in d.notes:
        print(f"[dim]- {note}[/]")


# ============== INSPECTION ==============

@cli.command()
def strategies():
    """Lists strategies with their data needs and default parameters."""
    table = Table(title="Strategies")
    table.add_column("Id"); table.add_column("Name"); table.add_column("Needs"); table.add_column("Parameters")
    for sid in list_strategies():
        s = create_strategy(sid)
        params = ", ".join(f"{k}={v}" for k, v in s.parameters().items())
        table.add_row(sid.value, s.name, str(s.required_candles), params)
    print(table)


@cli.command()
def gate(
    timeframe: str = typer.Option("1h", help="5m | 1h | 4h"),
    fees: float = typer.Option(settings.fees, help="Round-trip fees as a fraction"),
    slippage: float = typer.Option(settings.slippage, help="Slippage as a fraction"),
):
    """Checks whether the timeframe's interval clears trading cost."""
    g = ConformalGate()
    res = g.check(_timeframe(timeframe), fees, slippage)
    color = "green" if res.passed else "red"
    print(f"q05={res.lower:+.4f} q95={res.upper:+.4f} cost={max(g.floor, fees + slippage):.4f} "
          f"-> [{color}]{'PASS' if res.passed else 'FAIL'}[/]")


@cli.command()
def calibrate(
    raw: float = typer.Argument(..., help="Raw confidence 0..1"),
    timeframe: str = typer.Option("1h", help="5m | 1h | 4h"),
    method: str = typer.Option(settings.calibration, help="temperature | isotonic | fusion"),
):
    """Maps a raw confidence through the configured calibrator."""
    if method not in ("temperature", "isotonic", "fusion"):
        raise typer.BadParameter("method must be temperature, isotonic or fusion")
    calibrator = build_calibrator(PipelineConfig.from_settings(calibration=method))
    print(f"{method}: {raw:.4f} -> {calibrator.calibrate(raw, _timeframe(timeframe)):.4f}")


@cli.command()
def features(
    symbol: str = typer.Option(settings.default_symbol, help="Ex: EURUSD"),
    timeframe: str = typer.Option("1h", help="5m | 1h | 4h"),
    seed: int = typer.Option(42, help="Mock data seed"),
):
    """Prints the feature vector for the latest mock candles."""
    tf = _timeframe(timeframe)
    candles = asyncio.run(MockProvider(seed=seed).get_recent_candles(symbol, tf, limit=120))
    vec = build_features(candles)
    if vec is None:
        print("[yellow]Not enough candles for features.[/]")
        return
    for name, value in zip(FEATURE_NAMES, vec):
        print(f"{name:>18}: {value:+.6f}")


if __name__ == "__main__":
    cli()
