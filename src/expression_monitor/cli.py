"""
Expression Monitor CLI
Main entry point for running the expression pipeline against a camera.

Commands:
  [hours]     Run detection for the given duration
  --validate  Check configuration validity
  --dry-run   Reduce a list of classifications into events without a camera
"""

import argparse
import json
import logging
import signal
import sys
import time
from threading import Event as ThreadEvent

import yaml

from .capture import CameraSource, FrameCapture, TrackBinder
from .config import (
    Config,
    ConfigValidationError,
    find_config_file,
    load_config_with_env,
    print_validation_result,
    read_config_file,
    require_valid_config,
    validate_config_full,
)
from .delivery.webhook import WebhookDelivery
from .models.state import resolve_detection_interval
from .pipeline import ExpressionPipeline, ExpressionReducer

logger = logging.getLogger(__name__)

# Module-level shutdown signal for SIGTERM/SIGINT handling
_shutdown_signal = ThreadEvent()

SAMPLE_CLASSIFICATIONS = ["", "happy", "happy", "happy", "sad", "sad", ""]


def _handle_shutdown_signal(signum, _frame):
    """Handle SIGTERM/SIGINT for graceful shutdown."""
    signal_name = "SIGTERM" if signum == signal.SIGTERM else "SIGINT"
    # Note: print is safer than logger in signal handlers
    print(f"\nReceived {signal_name}, initiating graceful shutdown...")
    _shutdown_signal.set()


def _setup_signal_handlers():
    """Register signal handlers for graceful shutdown."""
    signal.signal(signal.SIGTERM, _handle_shutdown_signal)
    signal.signal(signal.SIGINT, _handle_shutdown_signal)


def setup_logging(quiet: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        quiet: If True, only show warnings and errors
    """
    level = logging.WARNING if quiet else logging.INFO

    # Custom formatter with shorter module names
    class ShortNameFormatter(logging.Formatter):
        def format(self, record):
            record.name = record.name.replace("expression_monitor.", "em.")
            return super().format(record)

    handler = logging.StreamHandler()
    handler.setFormatter(
        ShortNameFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s", datefmt="%H:%M:%S"
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(level)


def load_config(config_path: str = "config.yaml") -> dict:
    """
    Load a configuration file and apply environment overrides.

    Raises:
        SystemExit: If the file cannot be found or parsed
    """
    config_file = find_config_file(config_path)
    if config_file is None:
        logger.error(f"No config file found ({config_path})")
        logger.error("Copy an existing config to ./config.yaml or pass --config")
        sys.exit(1)

    try:
        config = read_config_file(config_file)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in {config_file}: {e}")
        sys.exit(1)

    logger.info(f"Configuration loaded from {config_file}")
    return load_config_with_env(config)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Expression Monitor - Classify facial expressions and deliver them to a webhook",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m expression_monitor 1              # Run for 1 hour
  python -m expression_monitor 0.5 --quiet    # Run for 30 minutes with minimal logs
  python -m expression_monitor --validate     # Check config validity
  python -m expression_monitor --dry-run      # Reduce a built-in sample stream
  python -m expression_monitor --dry-run labels.json --backend cpu

Environment Variables:
  CAMERA_URL               - Override camera URL from config
  EXPRESSION_WEBHOOK_URL   - Override webhook URL from config
  EXPRESSION_WEBHOOK_TOKEN - Bearer token for the webhook
        """,
    )

    parser.add_argument(
        "duration",
        type=float,
        nargs="?",
        help="Duration in hours (default: from config.yaml)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Quiet mode - only show warnings and errors",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and show derived settings",
    )
    parser.add_argument(
        "--dry-run",
        nargs="?",
        const="auto",
        metavar="LABELS_FILE",
        help="Reduce classifications (JSON list of labels) into events and print them",
    )
    parser.add_argument(
        "--backend",
        default="webgl",
        help="Backend assumed by --dry-run for duration scaling (default: webgl)",
    )

    return parser.parse_args(argv)


def run_validate(config_path: str) -> None:
    """Run validation mode."""
    config = load_config(config_path)
    result = validate_config_full(config)
    print_validation_result(result)
    sys.exit(0 if result.valid else 1)


def load_classifications(path: str) -> list[str]:
    """
    Load a JSON list of classification values.

    Raises:
        ValueError: If the file does not contain a list
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Expected a JSON list of labels")
    return [str(v) if v else "" for v in data]


def simulate_dry_run(
    values: list[str], backend: str, intervals: dict[str, int] | None = None
) -> list:
    """
    Feed classifications through the reducer, one detection interval apart.

    Returns:
        Emitted events, including the run flushed at the end
    """
    interval = resolve_detection_interval(backend, intervals)
    step = interval / 1000 if interval > 0 else 1.0
    now = [time.time()]

    def clock() -> float:
        return now[0]

    events = []
    reducer = ExpressionReducer(events.append, lambda: interval, clock)
    for value in values:
        reducer.observe(value)
        now[0] += step
    reducer.flush()
    return events


def run_dry_run(labels_file: str | None, backend: str) -> None:
    """Run dry-run mode."""
    if labels_file and labels_file != "auto":
        try:
            values = load_classifications(labels_file)
        except FileNotFoundError:
            print(f"Error: Labels file not found: {labels_file}")
            sys.exit(1)
        except (json.JSONDecodeError, ValueError) as e:
            print(f"Error: Invalid labels file: {e}")
            sys.exit(1)
    else:
        values = SAMPLE_CLASSIFICATIONS

    events = simulate_dry_run(values, backend)

    print(f"\n{len(values)} classification(s) -> {len(events)} event(s) (backend: {backend})")
    for event in events:
        print(f"  {event.label:<12} {event.duration:g} {event.unit}")
    print()
    sys.exit(0)


def build_pipeline(config: Config, source: CameraSource) -> ExpressionPipeline:
    """Wire camera, webhook and worker settings into a pipeline."""
    return ExpressionPipeline(
        binder=TrackBinder(source, FrameCapture),
        delivery=WebhookDelivery.from_config(config),
        models_url=config.worker.models_url,
        classifier=config.worker.classifier,
        intervals_ms=config.detection.intervals(),
        send_interval_seconds=config.webhook.send_interval_ms / 1000,
        start_method=config.worker.start_method,
    )


def print_banner(config: Config, duration_hours: float) -> None:
    """Print system startup banner."""
    print("\n" + "=" * 70)
    print("EXPRESSION MONITOR")
    print("=" * 70)
    print(f"\nCamera: {config.camera.url}")
    print(f"Classifier: {config.worker.classifier}")
    print(f"Webhook: {config.webhook.url or 'not configured'}")
    print(f"Duration: {duration_hours} hour(s) ({duration_hours * 60:.0f} minutes)")
    print("  Press Ctrl+C to stop early")
    print("=" * 70 + "\n")


def run(config: Config, duration_hours: float) -> None:
    """Run the pipeline until the duration elapses or a shutdown signal arrives."""
    source = CameraSource(config.camera.url)
    pipeline = build_pipeline(config, source)

    print_banner(config, duration_hours)

    try:
        if not pipeline.load_worker():
            logger.error("Expression detection could not start")
            return

        deadline = time.time() + duration_hours * 3600
        while not _shutdown_signal.is_set() and time.time() < deadline:
            _shutdown_signal.wait(timeout=1)
    finally:
        pipeline.shutdown()
        if len(pipeline.buffer):
            logger.info("Delivering remaining expressions...")
            outcome = pipeline.deliver_now()
            logger.info(f"Final delivery: {outcome.value}")
        source.close()

    print("=" * 70)
    print("SHUTDOWN COMPLETE")
    print("=" * 70 + "\n")


def main(argv: list[str] | None = None) -> None:
    """Main orchestrator function."""
    args = parse_args(argv)
    setup_logging(quiet=args.quiet or args.validate or args.dry_run is not None)

    if args.dry_run is not None:
        run_dry_run(args.dry_run, args.backend)
        return

    if args.validate:
        run_validate(args.config)
        return

    try:
        config = require_valid_config(load_config(args.config))
    except ConfigValidationError as e:
        for error in e.errors:
            logger.error(error)
        sys.exit(1)

    duration = args.duration if args.duration is not None else config.runtime.default_duration_hours
    if duration <= 0:
        logger.error(f"Invalid duration '{duration}' - must be positive")
        sys.exit(1)

    _setup_signal_handlers()
    run(config, duration)


if __name__ == "__main__":
    main()
