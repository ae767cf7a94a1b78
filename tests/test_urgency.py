#!/usr/bin/env python3
"""Tests for Urgency enum."""

from servicetrack import Urgency


class TestUrgency:
    """Tests for Urgency ranking."""

    def test_rank_ordering(self):
        """Higher rank = more urgent."""
        assert Urgency.OVERDUE.rank > Urgency.HIGH.rank
        assert Urgency.HIGH.rank > Urgency.MEDIUM.rank
        assert Urgency.MEDIUM.rank > Urgency.LOW.rank

    def test_rank_values(self):
        assert [u.rank for u in Urgency] == [1, 2, 3, 4]

    def test_values_are_level_names(self):
        assert Urgency("overdue") is Urgency.OVERDUE
        assert Urgency.LOW.value == "low"
