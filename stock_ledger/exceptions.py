class ReconciliationError(Exception):
    """
    The single failure signal raised when a ledger run cannot complete.
    No partial result is ever returned alongside it; the underlying cause
    is chained on __cause__.
    """

    def __init__(self, message: str = "Processing failed"):
        super().__init__(message)
