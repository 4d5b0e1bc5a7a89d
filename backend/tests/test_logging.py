import json
import logging

from runclub.core.logging import JSONFormatter


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord(
        name="runclub.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="GPS path off by %d%%",
        args=(50,),
        exc_info=None,
    )
    record.extra_fields = {"user_id": 7, "discrepancy": 0.5}

    data = json.loads(JSONFormatter().format(record))
    assert data["level"] == "WARNING"
    assert data["logger"] == "runclub.test"
    assert data["message"] == "GPS path off by 50%"
    assert data["user_id"] == 7
    assert data["discrepancy"] == 0.5
