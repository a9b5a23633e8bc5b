import threading

from flowgen.pipeline.rate_limiter import InMemoryRateLimiter


def test_ten_requests_then_denied(limiter, clock):
    remaining = []
    for _ in range(10):
        decision = limiter.check("tenant-a")
        assert decision.allowed
        remaining.append(decision.remaining)
        clock.advance(1)

    assert remaining == [9, 8, 7, 6, 5, 4, 3, 2, 1, 0]

    denied = limiter.check("tenant-a")
    assert not denied.allowed
    assert denied.remaining == 0
    assert 0 < denied.reset_in_seconds <= 3600
    assert denied.reset_in_seconds == 3600 - 10


def test_denied_reset_rounds_up(limiter, clock):
    for _ in range(10):
        limiter.check("t")
    clock.advance(0.5)

    assert limiter.check("t").reset_in_seconds == 3600


def test_tenants_are_isolated(limiter):
    for _ in range(10):
        limiter.check("busy")

    assert not limiter.check("busy").allowed
    assert limiter.check("quiet").remaining == 9


def test_window_expiry_starts_fresh(limiter, clock):
    for _ in range(11):
        limiter.check("t")

    clock.advance(3601)
    decision = limiter.check("t")

    assert decision.allowed
    assert decision.remaining == 9
    assert decision.reset_in_seconds == 3600


def test_reset_clears_tenant(limiter):
    for _ in range(10):
        limiter.check("t")

    limiter.reset("t")

    assert limiter.check("t").remaining == 9


def test_concurrent_checks_never_over_admit():
    limiter = InMemoryRateLimiter(max_requests=25, window_seconds=60)
    allowed = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        for _ in range(10):
            if limiter.check("shared").allowed:
                allowed.append(1)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(allowed) == 25


def test_expired_tenants_are_dropped(limiter, clock):
    for i in range(5000):
        limiter.check(f"tenant-{i}")
    assert limiter.tenant_count == 5000

    clock.advance(10 * 3600)
    limiter.check("late")

    assert limiter.tenant_count == 1


def test_live_windows_survive_sweep(limiter, clock):
    limiter.check("old")
    clock.advance(3000)
    for _ in range(3):
        limiter.check("recent")

    clock.advance(700)
    decision = limiter.check("recent")

    assert limiter.tenant_count == 1
    assert decision.remaining == 6


def test_denied_at_window_edge_waits_at_least_a_second(limiter, clock):
    for _ in range(10):
        limiter.check("t")
    clock.advance(3600)

    denied = limiter.check("t")

    assert not denied.allowed
    assert denied.reset_in_seconds == 1
