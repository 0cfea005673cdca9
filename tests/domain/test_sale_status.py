"""Unit tests for the sale lifecycle rules."""

import pytest

from pos.domain.exceptions import ConflictError, InvalidStatusTransitionError, ValidationError
from pos.domain.model.sale_status import SaleStatus, can_transition, ensure_transition

P, C, X = SaleStatus.PENDING, SaleStatus.COMPLETED, SaleStatus.CANCELLED


class TestTransitions:

    @pytest.mark.parametrize("src,dst", [(P, C), (P, X), (C, X)])
    def test_allowed(self, src, dst):
        assert can_transition(src, dst)
        ensure_transition(src, dst)

    @pytest.mark.parametrize("src,dst", [(C, P), (X, P), (X, C), (X, X), (P, P), (C, C)])
    def test_rejected(self, src, dst):
        assert not can_transition(src, dst)
        with pytest.raises(InvalidStatusTransitionError):
            ensure_transition(src, dst)

    def test_invalid_transition_is_a_conflict(self):
        with pytest.raises(ConflictError, match="from 'cancelled' to 'completed'"):
            ensure_transition(X, C)


class TestParse:

    def test_parse_string(self):
        assert SaleStatus.parse("Pending") is P

    def test_parse_passthrough(self):
        assert SaleStatus.parse(C) is C

    def test_parse_unknown(self):
        with pytest.raises(ValidationError, match="Invalid sale status"):
            SaleStatus.parse("refunded")
