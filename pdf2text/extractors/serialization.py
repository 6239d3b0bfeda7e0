import typing
from dataclasses import fields, is_dataclass

# Type marker key used for serialization
_TYPE_KEY = "_type"


def _serialize_for_json(value: typing.Any) -> typing.Any:
    if is_dataclass(value) and not isinstance(value, type):
        result = {
            _TYPE_KEY: type(value).__name__,
        }
        for item in fields(value):
            result[item.name] = _serialize_for_json(getattr(value, item.name))
        return result
    if isinstance(value, dict):
        return {str(key): _serialize_for_json(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_serialize_for_json(item) for item in value]
    return value


def serialize_extraction(value: typing.Any) -> dict:
    """
    Convert an extraction result into JSON-compatible dictionaries.

    Every dataclass becomes a dictionary carrying its class name under the
    ``_type`` key.

    Example:
        >>> content = next(read_file("report.pdf"))
        >>> json.dumps(serialize_extraction(content))
    """
    serialized = _serialize_for_json(value)
    if isinstance(serialized, dict):
        return serialized
    return {"value": serialized}
