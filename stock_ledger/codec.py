import logging
from typing import Any, Optional

from pydantic import ValidationError

from .exceptions import ReconciliationError
from .ledger import reconcile_history
from .schemas import ReconcileRequest, ReconciliationResult

logger = logging.getLogger(__name__)


def parse_request(payload: dict[str, Any] | str | bytes) -> ReconcileRequest:
    """Validates a camelCase payload (already decoded, or raw JSON) into a request."""
    if isinstance(payload, (str, bytes)):
        return ReconcileRequest.model_validate_json(payload)
    return ReconcileRequest.model_validate(payload)


def serialize_result(result: ReconciliationResult) -> dict[str, Any]:
    """
    Shapes a result for the wire:
    {"entries": {"YYYYMMDD": {"data": {...}, "goodsIssueIds": [...]}}, "totalDuration": n}
    """
    entries = {}
    for day in result.sorted_days():
        snapshot, goods_issue_ids = result.entries[day]
        entries[day] = {
            "data": snapshot.model_dump(mode="json", by_alias=True),
            "goodsIssueIds": sorted(goods_issue_ids),
        }
    return {"entries": entries, "totalDuration": result.total_duration}


def reconcile_request(
    request: ReconcileRequest, now: Optional[int] = None
) -> ReconciliationResult:
    return reconcile_history(
        item=request.inventory,
        inventory_id=request.inventory_id,
        asin_outbound=request.asin_outbound_list,
        receipt=request.goods_receipt,
        history=request.inventory_history_list,
        inbound_units=request.inventory_ids_map,
        from_date=request.from_date,
        to_date=request.to_date,
        now=now,
        opening_stock_qty=request.opening_stock_qty,
    )


def process_inventory_history(
    payload: dict[str, Any] | str | bytes, now: Optional[int] = None
) -> dict[str, Any]:
    """
    Binding-level entry point: payload in, serialized ledger out.
    Any failure surfaces as ReconciliationError; nothing is retried.
    """
    try:
        request = parse_request(payload)
    except ValidationError as e:
        logger.error("❌ Payload validation failed!")
        logger.error(e)
        raise ReconciliationError("Invalid payload") from e

    return serialize_result(reconcile_request(request, now=now))
