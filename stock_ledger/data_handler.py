import json
import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import requests

from . import settings
from . import utils
from .codec import serialize_result
from .schemas import DaySnapshot, ReconciliationResult

logger = logging.getLogger(__name__)

DIMENSION_COLUMNS = ("masterDimension", "dimension")
DIMENSION_AXES = ("length", "width", "height")


def load_payload(file_path: Path) -> dict[str, Any] | None:
    """Reads one item's JSON payload. Returns None when the file is missing or not JSON."""
    try:
        with open(file_path, encoding="utf-8-sig") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error(f"❌ Payload not found at {file_path}.")
        return None
    except json.JSONDecodeError as e:
        logger.error(f"❌ Could not parse {file_path.name} as JSON. Reason: {e}")
        return None


def build_ledger_frame(result: ReconciliationResult) -> pd.DataFrame:
    """One row per day in calendar order, with camelCase column headers."""
    columns = ["day"]
    for name, info in DaySnapshot.model_fields.items():
        alias = info.alias or name
        if alias in DIMENSION_COLUMNS:
            # Dimensions are nested objects; flatten them so the CSV stays one level deep.
            columns.extend(f"{alias}.{axis}" for axis in DIMENSION_AXES)
        else:
            columns.append(alias)
    columns.append("goodsIssueIds")

    rows = []
    for day in result.sorted_days():
        snapshot, goods_issue_ids = result.entries[day]
        row = {"day": day}
        for key, value in snapshot.model_dump(mode="json", by_alias=True).items():
            if key in DIMENSION_COLUMNS:
                for axis in DIMENSION_AXES:
                    row[f"{key}.{axis}"] = value[axis]
            elif key == "asinOutbound":
                row[key] = ";".join(value)
            else:
                row[key] = value
        row["goodsIssueIds"] = ";".join(sorted(goods_issue_ids))
        rows.append(row)

    return pd.DataFrame(rows, columns=columns)


def save_outputs(
    result: ReconciliationResult, report_name: str, output_dir: Optional[Path] = None
) -> tuple[Path, Optional[Path]]:
    """Saves the ledger to CSV and conditionally to JSON, with dated filenames."""
    output_dir = output_dir or settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = output_dir / f"{report_name}_{date_suffix}.csv"
    json_path = output_dir / f"{report_name}_{date_suffix}.json"

    build_ledger_frame(result).to_csv(csv_path, index=False)
    logger.info(f"✅ Ledger saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(serialize_result(result), f, indent=2)
        logger.info(f"✅ JSON output saved to: {json_path}")
        return csv_path, json_path

    logger.info("INFO: Skipping JSON file save as per configuration.")
    return csv_path, None


def post_to_webhook(
    result: ReconciliationResult, metadata: dict[str, Any], report_type: str
) -> bool:
    """
    Posts the serialized ledger and run metadata to the webhook.
    A delivery failure is logged, never raised.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting {report_type} to webhook: {settings.WEBHOOK_URL}")

    payload = {
        "reportType": report_type,
        "reportData": serialize_result(result),
        "metadata": metadata,
    }

    try:
        response = requests.post(
            settings.WEBHOOK_URL, json=payload, timeout=settings.WEBHOOK_TIMEOUT
        )
        response.raise_for_status()
        logger.info("✅ Ledger successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
