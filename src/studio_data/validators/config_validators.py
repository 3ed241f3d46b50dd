def to_uppercase(value: str | None) -> str | None:
    """
    Converts a string to uppercase if it's not None.
    """
    if value is None:
        return None
    return value.upper()


def to_lowercase(value: str | None) -> str | None:
    if value is None:
        return None
    return value.lower()


def split_csv(value):
    """
    Accept either a list or a comma separated string (as env vars arrive) and return a
    list of stripped, lower-cased, non-empty items.
    """
    if value is None:
        return None
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return [str(item).strip().lower() for item in items if str(item).strip()]
