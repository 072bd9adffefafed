"""Tests for the bounded notice feed."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from market_admin.ui.notices import NoticeFeed


def test_repeated_error_collapses_into_count() -> None:
    feed = NoticeFeed(max_notices=10)
    start = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)
    feed.add("ERROR", "Failed to toggle market: Forbidden", ts=start)
    feed.add("ERROR", "Failed to toggle market: Forbidden", ts=start + timedelta(seconds=3))
    notices = feed.snapshot()
    assert len(notices) == 1
    assert notices[0].count == 2
    assert notices[0].ts == start + timedelta(seconds=3)
    assert feed.count("ERROR") == 2


def test_info_notices_are_not_collapsed() -> None:
    feed = NoticeFeed()
    feed.info("Market deleted successfully.")
    feed.info("Market deleted successfully.")
    assert len(feed.snapshot()) == 2


def test_interleaved_errors_stay_separate() -> None:
    feed = NoticeFeed()
    feed.error("A")
    feed.info("ok")
    feed.error("A")
    assert [n.message for n in feed.snapshot()] == ["A", "ok", "A"]


def test_feed_is_bounded_and_orders_newest_first() -> None:
    feed = NoticeFeed(max_notices=3)
    for index in range(5):
        feed.warn(f"w{index}")
    assert [n.message for n in feed.snapshot()] == ["w2", "w3", "w4"]
    assert [n.message for n in feed.snapshot(newest_first=True)] == ["w4", "w3", "w2"]
    assert feed.latest is not None and feed.latest.message == "w4"


def test_naive_timestamps_are_treated_as_utc() -> None:
    feed = NoticeFeed()
    notice = feed.add("INFO", "hello", ts=datetime(2026, 3, 1, 9, 0))
    assert notice.ts.tzinfo is UTC
