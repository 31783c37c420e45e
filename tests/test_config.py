import json
import unittest

import pytest

from harness._config import load_json, load_typed
from harness._logging import get_logger, redact_config
from harness.errors import ConfigParseError, ValidationError
from harness.protocol import ConfiguredCatalog
from harness.validation import SchemaValidator, validate_config

SCHEMA = {
    "type": "object",
    "required": ["host", "port"],
    "properties": {
        "host": {"type": "string"},
        "port": {"type": "integer", "minimum": 1},
    },
}


def test_load_json_reads_any_json_value(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps([{"cursor": 3}]), encoding="utf-8")

    assert load_json(path) == [{"cursor": 3}]
    assert load_json(str(path)) == [{"cursor": 3}]


def test_load_json_missing_file_raises(tmp_path):
    with pytest.raises(ConfigParseError) as excinfo:
        load_json(tmp_path / "missing.json")

    assert "file not found" in str(excinfo.value)


def test_load_json_malformed_file_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigParseError) as excinfo:
        load_json(path)

    assert excinfo.value.path == str(path)
    assert "invalid JSON" in excinfo.value.reason


def test_config_parse_error_is_a_value_error(tmp_path):
    with pytest.raises(ValueError):
        load_json(tmp_path)


def test_load_typed_builds_the_model(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps({"streams": [{"stream": {"name": "users"}, "sync_mode": "incremental", "cursor_field": ["id"]}]}),
        encoding="utf-8",
    )

    catalog = load_typed(path, ConfiguredCatalog)

    assert catalog.streams[0].stream.name == "users"
    assert catalog.streams[0].cursor_field == ["id"]


def test_load_typed_wrong_shape_raises(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"streams": [{"sync_mode": "sometimes"}]}), encoding="utf-8")

    with pytest.raises(ConfigParseError) as excinfo:
        load_typed(path, ConfiguredCatalog)

    assert "ConfiguredCatalog" in excinfo.value.reason


class SchemaValidatorTests(unittest.TestCase):
    def setUp(self):
        self.validator = SchemaValidator()

    def test_valid_config_has_no_errors(self):
        self.assertEqual(self.validator.validate(SCHEMA, {"host": "db", "port": 5432}), set())

    def test_every_violation_is_reported(self):
        errors = self.validator.validate(SCHEMA, {"port": 0})

        self.assertEqual(len(errors), 2)
        self.assertTrue(any("'host' is a required property" in error for error in errors))
        self.assertTrue(any(error.startswith("$.port") for error in errors))

    def test_validate_config_raises_with_all_errors_and_context(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_config(self.validator, SCHEMA, {"host": 1}, "DISCOVER")

        error = ctx.exception
        self.assertEqual(error.context, "DISCOVER")
        self.assertEqual(len(error.errors), 2)
        self.assertIn("Verification error(s) occurred for DISCOVER", str(error))
        self.assertIn("'port' is a required property", str(error))

    def test_validate_config_accepts_valid_config(self):
        validate_config(self.validator, SCHEMA, {"host": "db", "port": 1}, "READ")

    def test_validators_are_independent(self):
        other = SchemaValidator()
        self.assertIsNot(other, self.validator)
        self.assertEqual(other.validate(SCHEMA, {}), self.validator.validate(SCHEMA, {}))


def test_redact_config_masks_nested_secrets():
    redacted = redact_config({"host": "db", "password": "hunter2", "auth": {"token": "abc", "user": "me"}})

    assert redacted == {"host": "db", "password": "***", "auth": {"token": "***", "user": "me"}}


def test_redact_config_masks_secrets_inside_lists():
    redacted = redact_config({"replicas": [{"host": "a", "Password": "x"}, "plain"], "token": None})

    assert redacted == {"replicas": [{"host": "a", "Password": "***"}, "plain"], "token": None}


def test_get_logger_namespaces_under_harness():
    assert get_logger("config").name == "harness.config"
