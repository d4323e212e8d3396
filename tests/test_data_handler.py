import json

import pytest
import requests

from stock_ledger import data_handler, settings

from tests.helpers import DAY1, DAY2, S, make_event


@pytest.fixture
def result(run):
    return run(
        [
            make_event(DAY1, S.OTHER, S.AVAILABLE, 100, 100),
            make_event(DAY2, S.AVAILABLE, S.ON_HAND, 10, 100, "GI-2"),
            make_event(DAY2 + 60, S.ON_HAND, S.EXPORTED, 10, 90, "GI-2"),
        ]
    )


def test_load_payload(tmp_path):
    path = tmp_path / "payload.json"
    path.write_text(json.dumps({"inventoryId": "INV-1"}), encoding="utf-8")
    assert data_handler.load_payload(path) == {"inventoryId": "INV-1"}


def test_load_payload_missing_or_broken(tmp_path):
    assert data_handler.load_payload(tmp_path / "nope.json") is None
    broken = tmp_path / "broken.json"
    broken.write_text("{oops", encoding="utf-8")
    assert data_handler.load_payload(broken) is None


def test_build_ledger_frame(result):
    df = data_handler.build_ledger_frame(result)
    assert list(df["day"]) == ["20240301", "20240302", "20240310"]
    assert "masterDimension.length" in df.columns
    assert "masterDimension" not in df.columns
    assert df.loc[1, "outboundQty"] == 10
    assert df.loc[1, "goodsIssueIds"] == "GI-2"
    assert df.loc[0, "asinOutbound"] == "OUT-1;OUT-2"
    assert df.loc[1, "dimension.width"] == 20


def test_save_outputs_writes_csv_and_json(result, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", True)
    csv_path, json_path = data_handler.save_outputs(result, "ledger_test", output_dir=tmp_path)

    assert csv_path.exists()
    assert csv_path.read_text(encoding="utf-8").startswith("day,openingStock,")
    saved = json.loads(json_path.read_text(encoding="utf-8"))
    assert saved["totalDuration"] == result.total_duration
    assert set(saved["entries"]) == {"20240301", "20240302", "20240310"}


def test_save_outputs_can_skip_json(result, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", False)
    csv_path, json_path = data_handler.save_outputs(result, "ledger_test", output_dir=tmp_path)
    assert csv_path.exists()
    assert json_path is None


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


def test_post_to_webhook_without_url(result, monkeypatch):
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    assert data_handler.post_to_webhook(result, {}, "ledger") is False


def test_post_to_webhook_sends_serialized_ledger(result, monkeypatch):
    sent = {}

    def fake_post(url, json=None, timeout=None):
        sent.update(url=url, json=json, timeout=timeout)
        return FakeResponse()

    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://hooks.example.test/ledger")
    monkeypatch.setattr(data_handler.requests, "post", fake_post)

    assert data_handler.post_to_webhook(result, {"inventoryId": "INV-1"}, "ledger") is True
    assert sent["url"] == "https://hooks.example.test/ledger"
    assert sent["json"]["reportType"] == "ledger"
    assert sent["json"]["metadata"] == {"inventoryId": "INV-1"}
    assert sent["json"]["reportData"]["totalDuration"] == result.total_duration


def test_post_to_webhook_failure_is_logged_not_raised(result, monkeypatch):
    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://hooks.example.test/ledger")
    monkeypatch.setattr(
        data_handler.requests, "post", lambda *args, **kwargs: FakeResponse(500)
    )
    assert data_handler.post_to_webhook(result, {}, "ledger") is False
