"""Unit tests for slug and search helpers"""
import re
import pytest

from storefront.utils.text import contains_pattern, slugify


class TestSlugify:

    @pytest.mark.parametrize("value,expected", [
        ("Classic Polo Shirt", "classic-polo-shirt"),
        ("Men's Polo Shirt (XL)", "mens-polo-shirt-xl"),
        ("  T-shirts  ", "t-shirts"),
        ("Café Crème", "cafe-creme"),
        ("!!!", ""),
    ])
    def test_slugify(self, value, expected):
        assert slugify(value) == expected


class TestContainsPattern:

    def test_escapes_regex_characters(self):
        pattern = contains_pattern(" a+b (c) ")

        assert pattern["$options"] == "i"
        assert re.search(pattern["$regex"], "xx a+b (c) yy")
        assert not re.search(pattern["$regex"], "aab c")
