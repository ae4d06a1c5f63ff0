import logging

import pytest

from cycle_stats.domain.innings import InningsPitched, total_innings


class TestParse:
    @pytest.mark.parametrize(
        ("value", "outs"),
        [
            ("6.2", 20),
            ("6.0", 18),
            ("0.1", 1),
            ("7", 21),
            (7, 21),
            (None, 0),
            ("", 0),
        ],
    )
    def test_parses_box_score_notation(self, value: object, outs: int) -> None:
        assert InningsPitched.parse(value).outs == outs

    def test_invalid_remainder_keeps_whole_innings(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            ip = InningsPitched.parse("5.7")
        assert ip.outs == 15
        assert "5.7" in caplog.text

    def test_garbage_is_zero(self) -> None:
        assert InningsPitched.parse("abc").outs == 0

    def test_negative_is_zero(self) -> None:
        assert InningsPitched.parse("-2.1").outs == 0


class TestArithmetic:
    def test_three_single_outs_make_an_inning(self) -> None:
        total = InningsPitched(1) + InningsPitched(1) + InningsPitched(1)
        assert total.format() == "1.0"

    def test_sum_carries_outs_into_innings(self) -> None:
        total = total_innings([InningsPitched.parse("6.2"), InningsPitched.parse("2.2")])
        assert str(total) == "9.1"
        assert total.whole == 9
        assert total.remainder == 1

    def test_as_float(self) -> None:
        assert InningsPitched.parse("6.2").as_float() == pytest.approx(20 / 3)

    def test_ordering(self) -> None:
        assert InningsPitched.parse("5.2") < InningsPitched.parse("6.0")
