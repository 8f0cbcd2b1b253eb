from services.report_cache import ReportCache, decode_cache_key, make_cache_key


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_key_is_canonical():
    a = make_cache_key({"last_name": "Smith", "status": "ABSENT"}, {"page": 1, "limit": 20})
    b = make_cache_key({"status": "ABSENT", "last_name": "Smith", "date": None}, {"limit": 20, "page": 1})
    assert a == b
    assert a != make_cache_key({"last_name": "Smith"})


def test_key_decodes_to_request():
    key = make_cache_key({"only_late": True}, None, {"sort_by": "name", "sort_order": "asc"})
    assert decode_cache_key(key) == {
        "filters": {"only_late": True},
        "sort": {"sort_by": "name", "sort_order": "asc"},
    }


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = ReportCache(ttl_seconds=60, clock=clock)
    cache.set("k", "report")

    clock.now += 59
    assert cache.get("k") == "report"
    clock.now += 1
    assert cache.get("k") is None
    assert len(cache) == 0


def test_least_recently_used_is_evicted():
    cache = ReportCache(ttl_seconds=60, max_entries=2, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)

    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3


def test_clear():
    cache = ReportCache()
    cache.set("a", 1)
    cache.clear()
    assert cache.get("a") is None
