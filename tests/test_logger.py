import logging

from stock_ledger import settings
from stock_ledger.logger import setup_logger


def test_file_handler_writes_to_ledger_log(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "BASE_DIR", tmp_path)
    name = "stock_ledger.tests.file_handler"
    # pytest installs handlers on the root logger; start from a bare one.
    monkeypatch.setattr(logging.getLogger(name), "hasHandlers", lambda: False)

    logger = setup_logger(name, logging.INFO)
    try:
        logger.info("hello")
        log_file = tmp_path / "logs" / "ledger.log"
        assert log_file.exists()
        assert "hello" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
