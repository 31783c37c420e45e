"""JSON Schema validation of connector configs against the declared spec."""

from typing import Any

from jsonschema import Draft7Validator
from jsonschema.validators import validator_for

from ._logging import get_logger
from .errors import ValidationError

LOGGER = get_logger("validation")


class SchemaValidator:
    """Collects every JSON Schema violation of a value.

    Schemas without a ``$schema`` keyword are checked as draft 7. Instances are
    cheap and hold no state between calls; each runner builds its own.
    """

    def __init__(self, default_validator: type = Draft7Validator):
        self.default_validator = default_validator

    def validate(self, schema: dict[str, Any], value: Any) -> set[str]:
        validator_class = validator_for(schema, default=self.default_validator)
        validator_class.check_schema(schema)
        validator = validator_class(schema)
        return {f"{error.json_path}: {error.message}" for error in validator.iter_errors(value)}


def validate_config(
    validator: SchemaValidator,
    schema: dict[str, Any],
    config: Any,
    context: str,
) -> None:
    """Raise ValidationError naming every failed constraint when ``config`` violates ``schema``."""
    errors = validator.validate(schema, config)
    if errors:
        LOGGER.error("Config validation failed for %s with %s error(s)", context, len(errors))
        raise ValidationError(errors, context)
    LOGGER.info("Config validated for %s", context)
