from library_api.errors import InvalidRequestError

# largest value an INTEGER primary key or OFFSET can hold
INT64_MAX = 2**63 - 1


def _to_int(value, field: str) -> int:
    # bool is an int subclass; true/false are not valid counts or ids
    if isinstance(value, bool):
        raise InvalidRequestError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise InvalidRequestError(f"{field} must be an integer")
    raise InvalidRequestError(f"{field} must be an integer")


def required_str(data: dict, field: str, max_len: int) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequestError(f"{field} is required")
    value = value.strip()
    if len(value) > max_len:
        raise InvalidRequestError(f"{field} must be at most {max_len} characters")
    return value


def required_int(data: dict, field: str, min_value=None, max_value=None) -> int:
    if data.get(field) is None:
        raise InvalidRequestError(f"{field} is required")
    value = _to_int(data[field], field)
    if min_value is not None and value < min_value:
        raise InvalidRequestError(f"{field} must be >= {min_value}")
    if max_value is not None and value > max_value:
        raise InvalidRequestError(f"{field} must be <= {max_value}")
    return value


def required_id(data: dict, field: str) -> int:
    return required_int(data, field, 1, INT64_MAX)


def optional_int(data: dict, field: str, min_value=None, max_value=None):
    if data.get(field) in (None, ""):
        return None
    return required_int(data, field, min_value, max_value)


def query_int(args, field: str, default: int) -> int:
    """Integer query-string parameter; falls back to default when missing or malformed."""
    raw = args.get(field)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def clamp_page(page, limit: int) -> int:
    """page >= 1, and small enough that (page - 1) * limit fits an OFFSET."""
    return min(max(1, int(page)), INT64_MAX // limit)
