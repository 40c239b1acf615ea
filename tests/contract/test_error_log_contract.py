from __future__ import annotations

import json

import jsonschema
import pytest
from jsonschema.exceptions import ValidationError

from sheetcrm.models.error_record import ErrorRecord

"""Error log line contract: one JSON object per line, fixed keys."""

ERROR_LOG_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "required": ["timestamp", "source", "sheet", "row", "error_type", "message"],
    "properties": {
        "timestamp": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$"},
        "source": {"type": "string"},
        "sheet": {"type": "string"},
        "row": {"type": "integer", "minimum": -1},
        "error_type": {
            "type": "string",
            "enum": ["PARSE_ERROR", "PERSISTENCE_ERROR", "SHEET_NOT_FOUND", "READ_ERROR", "UNEXPECTED_ERROR"],
        },
        "message": {"type": "string"},
    },
}


def test_created_record_matches_contract():
    rec = ErrorRecord.create("orders.csv", "Orders", -1, "PERSISTENCE_ERROR", "disk full")
    jsonschema.validate(json.loads(rec.to_json_line()), ERROR_LOG_SCHEMA)


def test_non_ascii_message_is_kept_verbatim():
    rec = ErrorRecord.create("cafés.csv", "Customers", -1, "PARSE_ERROR", "unexpected ‘quote’")
    line = rec.to_json_line()
    assert "cafés.csv" in line
    assert json.loads(line)["message"] == "unexpected ‘quote’"


def test_contract_rejects_extra_key():
    rec = json.loads(ErrorRecord.create("a.csv", "S", -1, "PARSE_ERROR", "x").to_json_line())
    rec["extra"] = "not allowed"
    with pytest.raises(ValidationError):
        jsonschema.validate(rec, ERROR_LOG_SCHEMA)
