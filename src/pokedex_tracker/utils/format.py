def normalize_key(key: object) -> str:
    """Canonicalize a lookup key (numeric id or name) to the lowercase string used for caching."""
    return str(key).lower()
