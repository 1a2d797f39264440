"""
Text helpers for URL slugs and free-text search
"""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """
    Convert a name into a lower-case ASCII slug.

    "Men's Polo Shirt (XL)" -> "mens-polo-shirt-xl"
    """
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower().replace("'", "")
    return _NON_ALNUM.sub("-", normalized).strip("-")


def contains_pattern(text: str) -> dict:
    """Case-insensitive substring match for a MongoDB query"""
    return {"$regex": re.escape(text.strip()), "$options": "i"}
