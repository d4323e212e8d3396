import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for data pipelines.
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(self, report_type: str, test_mode: bool = False):
        self.report_type = report_type
        self.test_mode = test_mode
        # Filled in by the concrete pipeline as it runs; sent alongside the report.
        self.status_summary: dict[str, Any] = {}

    def run(self) -> bool:
        """
        Orchestrates the pipeline execution. Returns True when the load step ran.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if raw_data is None:
            logger.warning(f"⚠️ No data extracted for {self.report_type}. Nothing to load.")
            return False

        # --- 2. TRANSFORM ---
        result = self.transform(raw_data)
        if result is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return False

        # --- 3. LOAD ---
        self.load(result)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return True

    @abstractmethod
    def extract(self) -> Optional[Any]:
        """
        Responsible for locating and reading the raw input.
        Returns None when there is nothing to process.
        """
        pass

    @abstractmethod
    def transform(self, raw_data: Any) -> Optional[Any]:
        """
        Responsible for validation and the actual computation.
        Returns None when the input could not be processed.
        """
        pass

    @abstractmethod
    def load(self, result: Any) -> None:
        """
        Saves the result to disk and posts it to the webhook.
        """
        pass
