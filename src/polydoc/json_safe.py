from datetime import date, datetime


def json_safe(obj):
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    return str(obj)


def raw_times(value):
    """Replace every datetime nested in `value` by its ISO-8601 string."""
    if isinstance(value, datetime):
        return json_safe(value)
    if isinstance(value, dict):
        return {k: raw_times(v) for k, v in value.items()}
    if isinstance(value, list):
        return [raw_times(v) for v in value]
    return value
