"""Tests for ResolverCache: lookup/insert contract and thread safety."""

import threading

from image_redirect.api.resolver_cache import ResolverCache


class TestLookupInsert:
    def test_miss_returns_none(self):
        assert ResolverCache().lookup(1) is None

    def test_insert_then_lookup(self):
        cache = ResolverCache()
        cache.insert(1, "https://img/1.jpg")
        assert cache.lookup(1) == "https://img/1.jpg"
        assert 1 in cache
        assert len(cache) == 1

    def test_last_write_wins(self):
        cache = ResolverCache()
        cache.insert(1, "https://img/old.jpg")
        cache.insert(1, "https://img/new.jpg")
        assert cache.lookup(1) == "https://img/new.jpg"
        assert len(cache) == 1

    def test_no_eviction(self):
        cache = ResolverCache()
        for i in range(5000):
            cache.insert(i, f"https://img/{i}.jpg")
        assert len(cache) == 5000
        assert cache.lookup(0) == "https://img/0.jpg"


class TestThreadSafety:
    def test_concurrent_inserts_same_key(self):
        cache = ResolverCache()
        urls = [f"https://img/{i}.jpg" for i in range(16)]
        start = threading.Barrier(len(urls))
        seen = []

        def writer(url):
            start.wait()
            for _ in range(200):
                cache.insert(42, url)
                seen.append(cache.lookup(42))

        threads = [threading.Thread(target=writer, args=(u,)) for u in urls]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == 16 * 200
        assert set(seen) <= set(urls)
        assert len(cache) == 1
        assert cache.lookup(42) in urls

    def test_concurrent_inserts_distinct_keys(self):
        cache = ResolverCache()

        def writer(base):
            for i in range(base, base + 500):
                cache.insert(i, f"https://img/{i}.jpg")

        threads = [threading.Thread(target=writer, args=(b * 500,)) for b in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 4000
        assert all(cache.lookup(i) == f"https://img/{i}.jpg" for i in range(4000))
