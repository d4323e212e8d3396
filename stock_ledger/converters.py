from decimal import ROUND_HALF_UP, Decimal

from . import settings


def round_float(value: float, precision: int | None = None) -> float:
    """
    Rounds half away from zero at the given number of decimal places
    (default settings.DEFAULT_PRECISION). Python's round() is banker's
    rounding, so it is not used here.
    """
    if precision is None:
        precision = settings.DEFAULT_PRECISION
    multiplier = 10**precision
    # Decimal holds the scaled float exactly, so only a true .5 rounds up.
    scaled = Decimal(value * multiplier)
    return float(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP)) / multiplier


def calculate_cbm(
    quantity: int, inner_qty_on_mas: int, volume: float, master_volume: float
) -> float:
    """
    Volume in CBM for a unit quantity. Whole master cartons are measured with
    the carton volume and the remainder with the unit volume; when no carton
    volume is known every unit is measured individually.
    """
    master_boxes = quantity // inner_qty_on_mas
    inner_boxes = quantity % inner_qty_on_mas

    if master_volume > 0:
        cbm = master_boxes * master_volume + inner_boxes * volume
    else:
        cbm = quantity * volume

    return round_float(cbm, settings.CBM_PRECISION)


def calculate_master_qty(quantity: int, inner_qty_on_mas: int) -> int:
    """Number of master cartons needed for the quantity (ceiling division)."""
    return (quantity + inner_qty_on_mas - 1) // inner_qty_on_mas
