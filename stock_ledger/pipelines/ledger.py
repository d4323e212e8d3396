import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from stock_ledger import data_handler, settings
from stock_ledger.codec import parse_request, reconcile_request
from stock_ledger.exceptions import ReconciliationError
from stock_ledger.pipeline import DataPipeline
from stock_ledger.schemas import ReconciliationResult

logger = logging.getLogger(__name__)


class LedgerPipeline(DataPipeline):
    """Reconciles the history of exactly one inventory item per run."""

    def __init__(
        self,
        payload_path: Path,
        test_mode: bool = False,
        now: Optional[int] = None,
        output_dir: Optional[Path] = None,
    ):
        super().__init__("ledger", test_mode=test_mode)
        self.payload_path = Path(payload_path)
        self.now = now
        self.output_dir = output_dir
        self.inventory_id: Optional[str] = None

    def extract(self) -> dict[str, Any] | None:
        logger.info(f"--- Loading payload: {self.payload_path.name} ---")
        payload = data_handler.load_payload(self.payload_path)
        if payload is None:
            return None
        if not isinstance(payload, dict):
            logger.error("  > ERROR: Payload must be a JSON object for a single item.")
            return None
        return payload

    def transform(self, payload: dict[str, Any]) -> ReconciliationResult | None:
        try:
            logger.info("Validating payload against schema...")
            request = parse_request(payload)
            logger.info("✅ Payload validation successful.")
        except ValidationError as e:
            logger.error("❌ Payload validation failed!")
            logger.error(e)
            return None

        self.inventory_id = request.inventory_id
        try:
            result = reconcile_request(request, now=self.now)
        except ReconciliationError as e:
            logger.error(f"❌ {e}: {e.__cause__}")
            return None

        self.status_summary = {
            "inventoryId": request.inventory_id,
            "days": len(result.entries),
            "totalDuration": result.total_duration,
            "fromDate": request.from_date,
            "toDate": request.to_date,
        }
        return result

    def load(self, result: ReconciliationResult) -> None:
        logger.info("\n--- Ledger Summary ---")
        for day in result.sorted_days():
            snapshot = result.snapshot(day)
            logger.info(
                f"{day}: open {snapshot.opening_stock} -> close {snapshot.closing_stock} "
                f"(out {snapshot.outbound_qty}, storage {snapshot.storage_time_days}d)"
            )
        logger.info(f"Total duration: {result.total_duration} day(s)")

        report_name = f"{settings.OUTPUT_FILENAME_BASE}_{self.inventory_id or 'item'}"
        data_handler.save_outputs(result, report_name, output_dir=self.output_dir)

        if not self.test_mode:
            data_handler.post_to_webhook(
                result, metadata=self.status_summary, report_type=self.report_type
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
