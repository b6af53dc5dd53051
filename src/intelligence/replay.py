"""
CLI for replaying recorded samples through the intelligence engine.

Usage:
    python -m src.intelligence.replay FILE.csv [options]

The CSV needs a ``timestamp`` column plus one column per metric. Empty
cells mean the metric was not sampled in that row and are skipped.
"""

import argparse
import json
import logging
import sys

import pandas as pd
import structlog

from src.core.logger import level_from_env, setup_logging

from .engine import PerformanceIntelligence
from .methods import list_methods
from .models import AnomalyDetectionConfig, IntelligenceConfig, PatternConfig, PredictionConfig

logger = structlog.get_logger(__name__)

OUTPUTS = ("summary", "anomalies", "predictions", "patterns")


def parse_arguments(argv=None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Replay recorded metric samples through the performance intelligence engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        # Summary for a capture sampled every 5 minutes
        python -m src.intelligence.replay metrics.csv

        # One-minute cadence, anomalies only
        python -m src.intelligence.replay metrics.csv \\
            --sample-interval 60 \\
            --output anomalies
        """,
    )

    parser.add_argument("file", help="CSV file with a 'timestamp' column and one column per metric")

    # Anomaly detection
    parser.add_argument(
        "--min-data-points",
        type=int,
        default=10,
        help="Samples required before analysis runs (default: 10)",
    )
    parser.add_argument(
        "--window-size",
        type=int,
        default=50,
        help="Analysis window size (default: 50)",
    )
    parser.add_argument(
        "--alert-threshold",
        type=float,
        default=2.5,
        help="Z-score threshold in standard deviations (default: 2.5)",
    )

    # Forecasting
    parser.add_argument(
        "--algorithm",
        default="linear",
        choices=list_methods(),
        help="Forecast algorithm (default: linear)",
    )
    parser.add_argument(
        "--lookback-period",
        type=int,
        default=24,
        help="Samples used per forecast (default: 24)",
    )
    parser.add_argument(
        "--sample-interval",
        type=int,
        default=300,
        help="Seconds between samples, used to map horizons to steps (default: 300)",
    )

    # Patterns
    parser.add_argument(
        "--significance-threshold",
        type=float,
        default=0.95,
        help="Minimum pattern significance kept (default: 0.95)",
    )

    parser.add_argument(
        "--output",
        choices=OUTPUTS,
        default="summary",
        help="What to print as JSON (default: summary)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL from the environment, else WARNING)",
    )

    return parser.parse_args(argv)


def build_config(args) -> IntelligenceConfig:
    """Build configuration from arguments"""
    return IntelligenceConfig(
        anomaly_detection=AnomalyDetectionConfig(
            min_data_points=args.min_data_points,
            window_size=args.window_size,
            alert_threshold=args.alert_threshold,
        ),
        prediction=PredictionConfig(
            algorithm=args.algorithm,
            lookback_period=args.lookback_period,
            sample_interval_seconds=args.sample_interval,
        ),
        patterns=PatternConfig(significance_threshold=args.significance_threshold),
    )


def load_samples(path: str) -> pd.DataFrame:
    """Read the capture and order it by timestamp"""
    df = pd.read_csv(path)
    if "timestamp" not in df.columns:
        raise ValueError(f"{path} has no 'timestamp' column")

    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df.sort_values("timestamp", kind="stable").reset_index(drop=True)


def replay(engine: PerformanceIntelligence, df: pd.DataFrame) -> int:
    """Feed every row to the engine

    Returns:
        Number of rows ingested
    """
    metrics = [column for column in df.columns if column != "timestamp"]
    rows = 0
    for record in df.to_dict(orient="records"):
        samples = {
            name: float(record[name]) for name in metrics if not pd.isna(record[name])
        }
        if not samples:
            continue
        engine.add_metrics(samples, record["timestamp"].to_pydatetime())
        rows += 1
    return rows


def render(engine: PerformanceIntelligence, output: str) -> dict | list:
    if output == "anomalies":
        return [a.to_dict() for a in engine.get_anomalies()]
    if output == "predictions":
        return [p.to_dict() for p in engine.get_all_predictions()]
    if output == "patterns":
        return [p.to_dict() for p in engine.get_patterns()]
    return engine.get_intelligence_summary().to_dict()


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)

    if args.log_level:
        log_level = getattr(logging, args.log_level)
    else:
        log_level = level_from_env(default=logging.WARNING)
    setup_logging(level=log_level)

    try:
        df = load_samples(args.file)
        engine = PerformanceIntelligence(build_config(args))
        rows = replay(engine, df)
        logger.info("Replay completed", file=args.file, rows=rows)

        print(json.dumps(render(engine, args.output), indent=2))
        return 0

    except (OSError, ValueError, pd.errors.ParserError) as e:
        logger.error("Replay failed", file=args.file, error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
