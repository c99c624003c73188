from areuok.core import rate_limit
from areuok.core.rate_limit import RateLimiter, SlidingWindowStore


def test_window_blocks_over_limit_until_hits_expire():
    store = SlidingWindowStore(window_seconds=60)
    assert store.hit("k", 2, now=0.0)
    assert store.hit("k", 2, now=1.0)
    assert not store.hit("k", 2, now=2.0)
    assert store.hit("k", 2, now=61.0)


def test_idle_keys_are_evicted():
    store = SlidingWindowStore(window_seconds=60)
    for index in range(50):
        store.hit(f"10.0.0.1:GET:/x/{index}", 5, now=float(index % 10))
    assert len(store) == 50

    store.hit("10.0.0.2:GET:/y", 5, now=200.0)
    assert len(store) == 1


def test_device_ids_share_one_route_budget(client, monkeypatch):
    monkeypatch.setattr(rate_limit, "rate_limiter", RateLimiter("redis://127.0.0.1:1/0", 2))

    assert client.get("/api/v1/devices/a").status_code == 404
    assert client.get("/api/v1/devices/b").status_code == 404
    blocked = client.get("/api/v1/devices/c")
    assert blocked.status_code == 429
    assert blocked.json() == {"error": "rate_limit_exceeded"}

    assert client.get("/api/v1/search/devices", params={"q": "al"}).status_code == 200
    assert client.get("/api/v1/health").status_code == 200
    assert len(rate_limit.rate_limiter.memory_store) == 2
