"""Unit tests for the Redis cache helper"""
import json
import pytest
from unittest.mock import AsyncMock, MagicMock
from redis.exceptions import ConnectionError as RedisConnectionError

from storefront.core.cache import CacheHelper


def redis_with_keys(keys):
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock()
    client.delete = AsyncMock(return_value=len(keys))

    async def scan_iter(match=None):
        for key in keys:
            yield key

    client.scan_iter = MagicMock(side_effect=scan_iter)
    return client


class TestCacheKey:

    def test_scalar_params(self):
        assert CacheHelper.key("product_show", {"slug": "polo"}) == "product_show_slug_polo"

    def test_nested_params_are_hashed_stably(self):
        first = CacheHelper.key("product_index", {"page": 1, "filters": {"a": 1, "b": 2}})
        second = CacheHelper.key("product_index", {"page": 1, "filters": {"b": 2, "a": 1}})

        assert first == second
        assert first.startswith("product_index_page_1_filters_")
        assert len(first.rsplit("_", 1)[1]) == 32


class TestRemember:

    @pytest.mark.asyncio
    async def test_cache_hit_skips_loader(self):
        client = redis_with_keys([])
        client.get.return_value = json.dumps({"name": "Polo"})
        loader = AsyncMock()

        value = await CacheHelper(client=client, enabled=True).remember("k", loader)

        assert value == {"name": "Polo"}
        loader.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_miss_stores_value(self):
        client = redis_with_keys([])
        loader = AsyncMock(return_value=[1, 2])

        value = await CacheHelper(client=client, ttl=60, enabled=True).remember("k", loader)

        assert value == [1, 2]
        client.set.assert_awaited_once_with("k", "[1, 2]", ex=60)

    @pytest.mark.asyncio
    async def test_none_is_not_cached(self):
        client = redis_with_keys([])

        value = await CacheHelper(client=client, enabled=True).remember("k", AsyncMock(return_value=None))

        assert value is None
        client.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_redis_failure_falls_back_to_loader(self):
        client = redis_with_keys([])
        client.get.side_effect = RedisConnectionError("refused")

        value = await CacheHelper(client=client, enabled=True).remember("k", AsyncMock(return_value="fresh"))

        assert value == "fresh"

    @pytest.mark.asyncio
    async def test_disabled_cache_calls_loader(self):
        client = redis_with_keys([])

        value = await CacheHelper(client=client, enabled=False).remember("k", AsyncMock(return_value=3))

        assert value == 3
        client.get.assert_not_called()


class TestClear:

    @pytest.mark.asyncio
    async def test_clear_deletes_matching_keys(self):
        client = redis_with_keys(["product_index_page_1", "product_index_page_2"])

        deleted = await CacheHelper(client=client, enabled=True).clear("product_index*")

        assert deleted == 2
        client.scan_iter.assert_called_once_with(match="product_index*")
        client.delete.assert_awaited_once_with("product_index_page_1", "product_index_page_2")

    @pytest.mark.asyncio
    async def test_clear_listing_patterns(self):
        client = redis_with_keys([])

        await CacheHelper(client=client, enabled=True).clear_listing("product_")

        patterns = [call.kwargs["match"] for call in client.scan_iter.call_args_list]
        assert patterns == ["product_index*", "product_public_index*", "product_list*"]
        client.delete.assert_not_called()
