import unittest
from datetime import datetime, timedelta, timezone

import pytest

from junban.core import priority
from junban.core.errors import InvalidInputError
from junban.core.models import Task

NOW = datetime(2026, 1, 10, 12, 0, 0, tzinfo=timezone.utc)


class TestCalcScore(unittest.TestCase):
    def test_all_combinations(self) -> None:
        for i in (1, 2, 3):
            for u in (1, 2, 3):
                assert priority.calc_score(i, u) == i * 3 + u

    def test_known_values(self) -> None:
        assert priority.calc_score(3, 3) == 12
        assert priority.calc_score(3, 1) == 10
        assert priority.calc_score(1, 3) == 6
        assert priority.calc_score(1, 1) == 4

    def test_rejects_invalid_importance(self) -> None:
        for bad in (0, 4, 1.5, "2", None, True):
            with pytest.raises(InvalidInputError):
                priority.calc_score(bad, 2)  # type: ignore[arg-type]

    def test_rejects_invalid_urgency(self) -> None:
        for bad in (0, 4, 1.5, "2", None, False):
            with pytest.raises(InvalidInputError):
                priority.calc_score(2, bad)  # type: ignore[arg-type]

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="importance"):
            priority.calc_score(0, 1)


class TestGetCategory(unittest.TestCase):
    def test_quadrants(self) -> None:
        assert priority.get_category(3, 3) == "urgent_important"
        assert priority.get_category(3, 1) == "important_not_urgent"
        assert priority.get_category(3, 2) == "important_not_urgent"
        assert priority.get_category(1, 3) == "urgent_not_important"
        assert priority.get_category(2, 3) == "urgent_not_important"
        assert priority.get_category(2, 2) == "not_urgent_not_important"
        assert priority.get_category(1, 1) == "not_urgent_not_important"

    def test_color_and_label_follow_category(self) -> None:
        assert priority.get_color(3, 3) == "red"
        assert priority.get_color(3, 1) == "yellow"
        assert priority.get_color(1, 3) == "blue"
        assert priority.get_color(1, 1) == "gray"
        assert priority.get_label(3, 3) == "Urgent & important"

    def test_status_label_and_color(self) -> None:
        assert priority.get_status_label("in_progress") == "In progress"
        assert priority.get_status_color("completed") == "green"
        assert priority.get_status_label("unknown") == "Unknown"
        assert priority.get_status_color("unknown") == "gray"


class TestCalcWeight(unittest.TestCase):
    def test_no_time_factor_at_creation(self) -> None:
        for i in (1, 2, 3):
            for u in (1, 2, 3):
                assert priority.calc_weight(i, u, NOW, NOW) == priority.calc_score(i, u)

    def test_increases_with_age_until_cap(self) -> None:
        weights = [priority.calc_weight(2, 2, NOW - timedelta(days=d), NOW) for d in range(51)]
        for prev, cur in zip(weights, weights[1:], strict=False):
            assert cur > prev
        assert weights[-1] == pytest.approx(8.5)

    def test_partial_days_are_floored(self) -> None:
        w = priority.calc_weight(2, 2, NOW - timedelta(hours=23), NOW)
        assert w == 8

    def test_capped(self) -> None:
        assert priority.calc_weight(1, 1, NOW - timedelta(days=100), NOW) <= 4.5
        assert priority.calc_weight(1, 1, NOW - timedelta(days=1000), NOW) == pytest.approx(4.5)


class TestIsOverdue(unittest.TestCase):
    def test_past_due_pending(self) -> None:
        t = Task(title="t", due_date=NOW - timedelta(days=1))
        assert priority.is_overdue(t, NOW)

    def test_future_due_pending(self) -> None:
        t = Task(title="t", due_date=NOW + timedelta(days=1))
        assert not priority.is_overdue(t, NOW)

    def test_past_due_completed(self) -> None:
        t = Task(title="t", due_date=NOW - timedelta(days=1), status="completed")
        assert not priority.is_overdue(t, NOW)

    def test_no_due_date(self) -> None:
        t = Task(title="t", due_date=None)
        assert not priority.is_overdue(t, NOW)

    def test_exactly_due_is_not_overdue(self) -> None:
        t = Task(title="t", due_date=NOW)
        assert not priority.is_overdue(t, NOW)


if __name__ == "__main__":
    unittest.main()
