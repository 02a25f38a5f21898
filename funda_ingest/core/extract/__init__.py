from .sections import (
    KENMERK_FIELDS,
    find_section,
    flatten_fields,
    flatten_to_mapping,
    resolve,
    resolve_attribute,
)

__all__ = [
    "KENMERK_FIELDS",
    "find_section",
    "flatten_fields",
    "flatten_to_mapping",
    "resolve",
    "resolve_attribute",
]
