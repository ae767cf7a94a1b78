#!/usr/bin/env python3
"""Tests for the change broadcaster."""
import logging

from servicetrack import ChangeBroadcaster


class TestSubscribe:
    """Tests for subscribe/unsubscribe."""

    def test_subscribe_returns_active_handle(self):
        broadcaster = ChangeBroadcaster()
        subscription = broadcaster.subscribe(lambda: None)
        assert subscription.active
        assert len(broadcaster) == 1

    def test_unsubscribe(self):
        broadcaster = ChangeBroadcaster()
        calls = []
        subscription = broadcaster.subscribe(lambda: calls.append(1))
        subscription.unsubscribe()
        broadcaster.notify()
        assert not subscription.active
        assert len(broadcaster) == 0
        assert calls == []

    def test_unsubscribe_twice_is_harmless(self):
        broadcaster = ChangeBroadcaster()
        subscription = broadcaster.subscribe(lambda: None)
        subscription.unsubscribe()
        broadcaster.unsubscribe(subscription)
        assert len(broadcaster) == 0

    def test_same_callback_twice_gets_two_subscriptions(self):
        broadcaster = ChangeBroadcaster()
        calls = []

        def callback():
            calls.append(1)

        first = broadcaster.subscribe(callback)
        broadcaster.subscribe(callback)
        broadcaster.notify()
        assert calls == [1, 1]
        first.unsubscribe()
        broadcaster.notify()
        assert calls == [1, 1, 1]


class TestNotify:
    """Tests for notify."""

    def test_each_subscriber_called_once_in_order(self):
        broadcaster = ChangeBroadcaster()
        calls = []
        for name in ("a", "b", "c"):
            broadcaster.subscribe(lambda name=name: calls.append(name))
        broadcaster.notify()
        assert calls == ["a", "b", "c"]
        assert broadcaster.notify_count == 1

    def test_no_subscribers(self):
        broadcaster = ChangeBroadcaster()
        broadcaster.notify()
        assert broadcaster.notify_count == 1

    def test_failing_callback_does_not_stop_others(self, caplog):
        broadcaster = ChangeBroadcaster()
        calls = []

        def broken():
            raise RuntimeError("boom")

        broadcaster.subscribe(broken)
        broadcaster.subscribe(lambda: calls.append("after"))
        with caplog.at_level(logging.ERROR):
            broadcaster.notify()
        assert calls == ["after"]
        assert "Change callback failed" in caplog.text

    def test_callback_may_unsubscribe_itself(self):
        broadcaster = ChangeBroadcaster()
        calls = []
        holder = {}

        def once():
            calls.append("once")
            holder["sub"].unsubscribe()

        holder["sub"] = broadcaster.subscribe(once)
        broadcaster.subscribe(lambda: calls.append("other"))
        broadcaster.notify()
        broadcaster.notify()
        assert calls == ["once", "other", "other"]

    def test_callback_removed_mid_notify_is_skipped(self):
        broadcaster = ChangeBroadcaster()
        calls = []
        holder = {}

        def first():
            calls.append("first")
            holder["second"].unsubscribe()

        broadcaster.subscribe(first)
        holder["second"] = broadcaster.subscribe(lambda: calls.append("second"))
        broadcaster.notify()
        assert calls == ["first"]

    def test_subscriber_added_mid_notify_waits_for_next(self):
        broadcaster = ChangeBroadcaster()
        calls = []

        def adder():
            calls.append("adder")
            broadcaster.subscribe(lambda: calls.append("late"))

        sub = broadcaster.subscribe(adder)
        broadcaster.notify()
        assert calls == ["adder"]
        sub.unsubscribe()
        broadcaster.notify()
        assert calls == ["adder", "late"]
