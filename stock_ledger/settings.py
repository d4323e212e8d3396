import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")

# --- Filename Configuration ---
OUTPUT_FILENAME_BASE = os.getenv("OUTPUT_FILENAME_BASE", "inventory_ledger")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "true").lower() in ("1", "true", "yes")

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
WEBHOOK_TIMEOUT = int(os.getenv("WEBHOOK_TIMEOUT", "15"))

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Shared Business Logic ---
# Warehouse calendar days are always counted in UTC+7, never in local time.
TIMEZONE_OFFSET_HOURS = 7

# Decimal places used when rounding volumes.
DEFAULT_PRECISION = 2
CBM_PRECISION = 3

# Status codes that count as disposal (DAMAGED, RETURNED, LIQUIDATION).
DISPOSAL_STATUS_CODES = [3, 4, 5]
