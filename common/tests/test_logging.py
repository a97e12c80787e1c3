import json
import logging
import sys
from decimal import Decimal

from config.logging import JsonFormatter, SamplingFilter


def _record(msg, level=logging.INFO, **extra):
    record = logging.LogRecord("deerlab.inventory", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_merges_extra():
    payload = json.loads(JsonFormatter().format(_record("stock.committed", event="stock.committed", amount=Decimal("1.5"))))
    assert payload["message"] == "stock.committed"
    assert payload["event"] == "stock.committed"
    assert payload["amount"] == "1.5"
    assert payload["level"] == "INFO"
    assert payload["name"] == "deerlab.inventory"
    assert payload["time"].endswith("Z")
    assert "lineno" not in payload


def test_json_formatter_merges_dict_messages():
    payload = json.loads(JsonFormatter().format(_record(json.dumps({"action": "signin", "status": "success"}))))
    assert payload["action"] == "signin"
    assert "message" not in payload


def test_json_formatter_renders_exceptions():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record("failed", level=logging.ERROR)
        record.exc_info = sys.exc_info()
    payload = json.loads(JsonFormatter().format(record))
    assert "ValueError: boom" in payload["exc_info"]


def test_sampling_filter_keeps_allowed_events_and_other_levels():
    sampler = SamplingFilter(rate=0.0, levels=["INFO"], allow_events=["work_order.completed"])
    assert sampler.filter(_record("work_order.completed")) is True
    assert sampler.filter(_record("noise", event="work_order.completed")) is True
    assert sampler.filter(_record("noise")) is False
    assert sampler.filter(_record("noise", level=logging.WARNING)) is True


def test_sampling_filter_bad_rate_keeps_everything():
    assert SamplingFilter(rate="often").filter(_record("noise")) is True
