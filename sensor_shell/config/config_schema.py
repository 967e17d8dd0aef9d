"""JSON Schema (Draft 7) for the Sensor Shell configuration file."""

import copy
from typing import List, Tuple, Dict, Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError


def _section(description: str, **properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "description": description,
        "properties": properties,
        "additionalProperties": False,
    }


_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Sensor Shell Configuration",
    "type": "object",
    "properties": {
        "device": _section(
            "How the shell board is recognised",
            vendor_id={"type": "integer", "minimum": 0, "maximum": 0xFFFF,
                       "description": "USB vendor id of the board"},
        ),
        "query": _section(
            "Timing of one query/response cycle",
            timeout={"type": "number", "exclusiveMinimum": 0, "maximum": 300,
                     "description": "Seconds before a query gives up"},
            poll_interval={"type": "number", "minimum": 0, "maximum": 1,
                           "description": "Seconds between two reads of the link"},
            history_size={"type": "integer", "minimum": 1,
                          "description": "Readings remembered by the coordinator"},
        ),
        "logging": _section(
            "Communication log sinks",
            enabled={"type": "boolean"},
            level={"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
            log_to_file={"type": "boolean"},
            log_to_console={"type": "boolean", "description": "Echo entries on stderr"},
            log_file_path={"type": ["string", "null"], "minLength": 1,
                           "description": "Null picks a dated file under ~/.sensor-shell/logs"},
            max_file_size_mb={"type": "integer", "minimum": 1, "maximum": 1000},
            backup_count={"type": "integer", "minimum": 0, "maximum": 100},
        ),
    },
    "additionalProperties": False,
}


def _describe_location(error: ValidationError) -> Tuple[str, str]:
    path = [str(part) for part in error.path]
    if not path:
        return "root", "configuration"
    return path[0], ".".join(path[1:]) or "section"


class ConfigSchema:
    """Validation of raw (dict) configuration.

    Errors come back as sentences naming the section and field, so they can
    be printed to the user unchanged.

    Example:
        >>> ConfigSchema.validate_config({"query": {"timeout": 1.5}})
        (True, [])
        >>> ConfigSchema.validate_config({"device": {"vendor_id": -1}})[1]
        ["Section 'device', field 'vendor_id': Value must be >= 0, got -1."]
    """

    @staticmethod
    def get_schema() -> Dict[str, Any]:
        """A fresh copy of the schema; callers may mutate it."""
        return copy.deepcopy(_SCHEMA)

    @staticmethod
    def validate_config(config: Dict[str, Any], strict: bool = True) -> Tuple[bool, List[str]]:
        """Check ``config`` against the schema and the cross-field rules.

        Args:
            config: Parsed YAML, possibly partial
            strict: Reject keys the schema does not know

        Returns:
            (is_valid, error messages)
        """
        schema = ConfigSchema.get_schema()
        if not strict:
            schema = ConfigSchema._make_permissive(schema)

        errors = [ConfigSchema._format_error(e) for e in Draft7Validator(schema).iter_errors(config)]
        errors += ConfigSchema._custom_validation(config)
        return not errors, errors

    @staticmethod
    def _make_permissive(schema: Dict[str, Any]) -> Dict[str, Any]:
        permissive = copy.deepcopy(schema)
        pending = [permissive]
        while pending:
            node = pending.pop()
            node.pop("additionalProperties", None)
            pending.extend(value for value in node.values() if isinstance(value, dict))
        return permissive

    @staticmethod
    def _format_error(error: ValidationError) -> str:
        section, field = _describe_location(error)
        where = f"Section '{section}', field '{field}'"
        kind, limit, got = error.validator, error.validator_value, error.instance

        if kind == "type":
            detail = (f"Expected type {limit}, got {type(got).__name__} (value: {got}). "
                      f"Example: {field}: <{limit} value>")
        elif kind == "enum":
            detail = f"Expected one of {limit}, got {got}. Example: {field}: {limit[0]}"
        elif kind == "minimum":
            detail = f"Value must be >= {limit}, got {got}."
        elif kind == "exclusiveMinimum":
            detail = f"Value must be > {limit}, got {got}."
        elif kind == "maximum":
            detail = f"Value must be <= {limit}, got {got}. Example: {field}: {limit}"
        elif kind == "minLength":
            detail = f"String must be at least {limit} characters, got {len(got)}."
        elif kind == "additionalProperties":
            unknown = sorted(set(got) - set(error.schema.get("properties", {})))
            return (f"Section '{section}': Unknown fields {unknown} not allowed. "
                    f"Remove them or validate in permissive mode.")
        else:
            detail = error.message
        return f"{where}: {detail}"

    @staticmethod
    def _custom_validation(config: Dict[str, Any]) -> List[str]:
        """Rules JSON Schema cannot express."""
        errors = []

        def number(value):
            return isinstance(value, (int, float)) and not isinstance(value, bool)

        query = config.get("query")
        if isinstance(query, dict):
            timeout, interval = query.get("timeout"), query.get("poll_interval")
            if number(timeout) and number(interval) and interval >= timeout:
                errors.append(
                    f"Section 'query', field 'poll_interval': Interval {interval} must be "
                    f"shorter than timeout {timeout}. Example: poll_interval: 0.005"
                )

        log_section = config.get("logging")
        if isinstance(log_section, dict):
            path = log_section.get("log_file_path")
            if isinstance(path, str) and not ConfigSchema.validate_path(path):
                errors.append(
                    f"Section 'logging', field 'log_file_path': Path {path!r} contains "
                    f"invalid characters. Example: log_file_path: ./logs/comm.log"
                )

        return errors

    @staticmethod
    def validate_path(path: str) -> bool:
        """False for blank paths and paths holding NUL or line breaks."""
        if not path.strip():
            return False
        return not set(path) & {'\0', '\r', '\n'}
