"""
Field transformers for insights record projection.

Coerce loosely-typed store values into the types the extractors read.
"""

from modules.insights.transformers.text_transformers import (
    clean_whitespace,
    lowercase,
    to_string_list,
    contains_any,
)
from modules.insights.transformers.numeric_transformers import (
    extract_integer,
    to_integer,
    to_float,
    to_boolean,
)
from modules.insights.transformers.date_transformers import (
    parse_date,
    to_timestamp,
    calculate_age_from_dob,
)

__all__ = [
    # Text
    "clean_whitespace",
    "lowercase",
    "to_string_list",
    "contains_any",
    # Numeric
    "extract_integer",
    "to_integer",
    "to_float",
    "to_boolean",
    # Dates
    "parse_date",
    "to_timestamp",
    "calculate_age_from_dob",
]
