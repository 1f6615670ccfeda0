"""Unit tests for Entry and CachePolicy."""

import pytest

from sweep_cache.core.models import MS_PER_MINUTE, CachePolicy, Entry, SweepStats


class TestEntry:
    """Test Entry lifecycle and staleness checks."""

    def test_create_sets_both_timestamps(self):
        entry = Entry.create("value", now=5_000.0)

        assert entry.value == "value"
        assert entry.created_at == 5_000.0
        assert entry.last_renewed_at == 5_000.0

    def test_create_defaults_to_wall_clock(self):
        entry = Entry.create(1)
        assert entry.created_at > 0
        assert entry.last_renewed_at == entry.created_at

    def test_direct_construction_keeps_invariant(self):
        entry = Entry(value="v", created_at=100.0)
        assert entry.last_renewed_at == 100.0

    def test_is_stale_boundary(self):
        entry = Entry.create("v", now=0.0)

        assert not entry.is_stale(1, now=MS_PER_MINUTE - 1)
        assert entry.is_stale(1, now=MS_PER_MINUTE)
        assert entry.is_stale(1, now=MS_PER_MINUTE + 1)

    def test_fractional_ttl(self):
        entry = Entry.create("v", now=0.0)

        assert not entry.is_stale(0.5, now=29_999.0)
        assert entry.is_stale(0.5, now=30_000.0)

    def test_renew_moves_expiry_only(self):
        entry = Entry.create({"a": 1}, now=0.0)
        entry.renew(45_000.0)

        assert entry.value == {"a": 1}
        assert entry.created_at == 0.0
        assert entry.last_renewed_at == 45_000.0
        assert not entry.is_stale(1, now=MS_PER_MINUTE)
        assert entry.is_stale(1, now=45_000.0 + MS_PER_MINUTE)

    def test_renew_never_goes_before_creation(self):
        entry = Entry.create("v", now=10_000.0)
        entry.renew(5_000.0)

        assert entry.last_renewed_at >= entry.created_at

    def test_validity(self):
        assert Entry.create(0).is_valid
        assert Entry.create("").is_valid
        assert not Entry.create(None).is_valid


class TestCachePolicy:
    def test_coerce_strings(self):
        assert CachePolicy.coerce("force") is CachePolicy.FORCE
        assert CachePolicy.coerce(" RENEW ") is CachePolicy.RENEW
        assert CachePolicy.coerce(CachePolicy.RENEW) is CachePolicy.RENEW

    def test_coerce_unknown(self):
        with pytest.raises(ValueError):
            CachePolicy.coerce("lru")


def test_sweep_stats_defaults():
    stats = SweepStats()
    assert stats.deleted_count == 0
    assert stats.scanned_count == 0
