from datetime import datetime
from decimal import Decimal

import pytest

from fixit.domain.bookings.lifecycle import (
    ACTIVE_STATUSES,
    BOOKING_STATUSES,
    InvalidTransition,
    compute_pricing,
    next_status,
    tab_criteria,
)
from fixit.domain.reviews.aggregates import average_rating


class TestPricing:
    def test_fee_and_total_for_round_price(self):
        assert compute_pricing(200.00) == (Decimal("10.00"), Decimal("210.00"))

    def test_free_service(self):
        assert compute_pricing(0) == (Decimal("0.00"), Decimal("0.00"))

    @pytest.mark.parametrize(
        "price, fee, total",
        [
            (19.99, "1.00", "20.99"),
            (10.10, "0.51", "10.61"),
            (0.10, "0.01", "0.11"),
            (75, "3.75", "78.75"),
        ],
    )
    def test_rounds_half_up_to_cents(self, price, fee, total):
        assert compute_pricing(price) == (Decimal(fee), Decimal(total))


class TestTransitions:
    @pytest.mark.parametrize(
        "current, action, expected",
        [
            ("pending", "confirm", "confirmed"),
            ("pending", "start", "in_progress"),
            ("confirmed", "start", "in_progress"),
            ("in_progress", "complete", "completed"),
            ("pending", "cancel", "cancelled"),
            ("confirmed", "cancel", "cancelled"),
        ],
    )
    def test_allowed(self, current, action, expected):
        assert next_status(current, action) == expected

    @pytest.mark.parametrize(
        "current, action",
        [
            ("confirmed", "confirm"),
            ("in_progress", "confirm"),
            ("pending", "complete"),
            ("confirmed", "complete"),
            ("in_progress", "cancel"),
            ("in_progress", "start"),
        ],
    )
    def test_rejected(self, current, action):
        with pytest.raises(InvalidTransition):
            next_status(current, action)

    @pytest.mark.parametrize("terminal", ["completed", "cancelled"])
    def test_terminal_statuses_accept_nothing(self, terminal):
        for action in ("confirm", "start", "complete", "cancel"):
            with pytest.raises(InvalidTransition):
                next_status(terminal, action)

    def test_unknown_action(self):
        with pytest.raises(InvalidTransition, match="reopen"):
            next_status("pending", "reopen")

    def test_invalid_transition_is_a_value_error(self):
        with pytest.raises(ValueError):
            next_status("completed", "start")


class TestListingTabs:
    NOW = datetime(2026, 5, 10, 15, 30)

    def test_upcoming_starts_at_beginning_of_today(self):
        statuses, date_from = tab_criteria("upcoming", now=self.NOW)
        assert date_from == datetime(2026, 5, 10, 0, 0)
        assert set(statuses) == {"pending", "confirmed", "in_progress"}

    def test_finished_bookings_never_upcoming(self):
        statuses, _ = tab_criteria("upcoming", now=self.NOW)
        assert "completed" not in statuses
        assert "cancelled" not in statuses

    @pytest.mark.parametrize(
        "tab, expected",
        [("ongoing", ("in_progress",)), ("past", ("completed",)), ("cancelled", ("cancelled",))],
    )
    def test_status_tabs(self, tab, expected):
        assert tab_criteria(tab, now=self.NOW) == (expected, None)

    def test_all_is_unrestricted(self):
        assert tab_criteria("all") == (None, None)

    def test_unknown_tab(self):
        with pytest.raises(ValueError):
            tab_criteria("archived")

    def test_active_statuses_are_the_non_terminal_ones(self):
        assert set(ACTIVE_STATUSES) == set(BOOKING_STATUSES) - {"completed", "cancelled"}


class TestAverageRating:
    def test_one_decimal(self):
        assert average_rating([5, 4, 5]) == 4.7

    def test_no_ratings(self):
        assert average_rating([]) == 0.0

    def test_rounds_half_up(self):
        # 17 / 4 = 4.25
        assert average_rating([4, 4, 5, 4]) == 4.3

    def test_accepts_generators(self):
        assert average_rating(r for r in (3, 4)) == 3.5
