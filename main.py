import argparse
import logging
import sys
from pathlib import Path

from stock_ledger import settings, utils
from stock_ledger.logger import setup_logger
from stock_ledger.pipelines.ledger import LedgerPipeline


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile one inventory item's status history into a daily ledger."
    )
    parser.add_argument(
        "payload",
        nargs="?",
        type=Path,
        help="Path to the item's JSON payload. Defaults to the newest "
        "'payload*.json' in INPUT_DIR.",
    )
    parser.add_argument(
        "--test", action="store_true", help="Test mode: do not post to the webhook."
    )
    return parser.parse_args(argv)


def run_process(argv=None) -> int:
    """Main orchestration function: resolves the payload and runs the pipeline."""
    args = parse_args(argv)
    logger = setup_logger(None, getattr(logging, settings.LOG_LEVEL, logging.INFO))

    payload_path = args.payload or utils.find_latest_payload(settings.INPUT_DIR, "payload")
    if payload_path is None:
        logger.error(f"❌ No payload given and none found in {settings.INPUT_DIR}.")
        return 1

    pipeline = LedgerPipeline(payload_path, test_mode=args.test)
    return 0 if pipeline.run() else 1


if __name__ == "__main__":
    sys.exit(run_process())
