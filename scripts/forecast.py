#!/usr/bin/env python3
"""Train the price network on one symbol's history and print a forecast.

Bars are read from ``<data-path>/<SYMBOL>.csv`` (columns: date, close or
price, optional open/high/low/volume). Settings come from PredictorConfig
defaults, an optional YAML file, ``--override key=value`` pairs and finally
the explicit flags below.

Usage examples:

    uv run python scripts/forecast.py --data-path data/prices --symbol AAPL --days 5

    uv run python scripts/forecast.py --symbol AAPL --config conf/predictor.yaml \
        --override learning_rate=0.005 --seed 7

Nothing is written to disk unless ``--save-config`` is given.
"""

from __future__ import annotations

import argparse
import logging

from stockbrain.data.sources import CSVBarSource
from stockbrain.runner import run
from stockbrain.utils.config import compose_config, save_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Train the feed-forward price network and forecast future prices"
    )
    parser.add_argument("--data-path", type=str, default="data/prices",
                        help="Directory of <SYMBOL>.csv price files")
    parser.add_argument("--symbol", type=str, required=True, help="Symbol to load, e.g. AAPL")
    parser.add_argument("--start", type=str, default=None, help="Earliest bar date to include")
    parser.add_argument("--end", type=str, default=None, help="Latest bar date to include")
    parser.add_argument("--config", type=str, default=None, help="YAML file with PredictorConfig fields")
    parser.add_argument("--override", action="append", default=[],
                        help="Config override as key=value (repeatable)")
    parser.add_argument("--epochs", type=int, default=None, help="Max training epochs (default 2000)")
    parser.add_argument("--error-threshold", type=float, default=None,
                        help="Early-stop mean squared error (default 0.001)")
    parser.add_argument("--days", type=int, default=None, help="Days to forecast (default 5)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for weight init and dropout")
    parser.add_argument("--save-config", type=str, default=None,
                        help="Write the resolved config to this YAML path")
    parser.add_argument("--verbose", action="store_true", default=False, help="Enable debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    overrides = list(args.override)
    if args.epochs is not None:
        overrides.append(f"epochs={args.epochs}")
    if args.error_threshold is not None:
        overrides.append(f"error_threshold={args.error_threshold}")
    if args.days is not None:
        overrides.append(f"days_to_predict={args.days}")
    if args.seed is not None:
        overrides.append(f"seed={args.seed}")
    config = compose_config(args.config, overrides)

    if args.save_config:
        save_config(config, args.save_config)
        print(f"Config written to {args.save_config}")

    source = CSVBarSource(root_path=args.data_path)
    bars = source.load_bars(args.symbol, start=args.start, end=args.end)

    print("=" * 60)
    print(f"{args.symbol}: {len(bars)} bars ({bars[0].date} → {bars[-1].date})")
    print("=" * 60)

    model, result = run(bars, config=config, progress=True)

    print(f"Training: {model.iterations} epochs, mse={model.training_error:.6f}")
    print(f"Current price:   {result.current_price:.2f}")
    print(f"Predicted price: {result.predicted_price:.2f} ({result.change_percent:+.2f}%)")
    print(f"Confidence:      {result.confidence * 100:.1f}% ({result.confidence_label})")
    print()
    print(f"{'Date':<12}{'Price':>12}{'Confidence':>12}")
    for date, price, conf in zip(result.future_dates, result.future_prices, result.daily_confidences()):
        print(f"{date:<12}{price:>12.2f}{conf * 100:>11.1f}%")


if __name__ == "__main__":
    main()
