from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

OUTS_PER_INNING = 3


@dataclass(frozen=True, order=True)
class InningsPitched:
    """Innings pitched held as a count of outs.

    Box scores report innings as ``"6.2"`` meaning six innings and two outs.
    That notation is not a decimal, so all arithmetic happens in outs.
    """

    outs: int = 0

    @classmethod
    def parse(cls, value: object) -> InningsPitched:
        if value is None:
            return cls(0)
        if isinstance(value, int):
            return cls(max(value, 0) * OUTS_PER_INNING)
        text = str(value).strip()
        if not text:
            return cls(0)
        whole_text, _, remainder_text = text.partition(".")
        try:
            whole = int(whole_text) if whole_text else 0
        except ValueError:
            logger.warning("Unparseable innings pitched value %r", value)
            return cls(0)
        if whole < 0:
            return cls(0)
        remainder = 0
        if remainder_text:
            try:
                remainder = int(remainder_text)
            except ValueError:
                remainder = 0
            if remainder not in (0, 1, 2):
                logger.warning("Invalid outs remainder in innings pitched %r, keeping whole innings", value)
                remainder = 0
        return cls(whole * OUTS_PER_INNING + remainder)

    @property
    def whole(self) -> int:
        return self.outs // OUTS_PER_INNING

    @property
    def remainder(self) -> int:
        return self.outs % OUTS_PER_INNING

    def as_float(self) -> float:
        return self.outs / OUTS_PER_INNING

    def format(self) -> str:
        return f"{self.whole}.{self.remainder}"

    def __add__(self, other: InningsPitched) -> InningsPitched:
        return InningsPitched(self.outs + other.outs)

    def __str__(self) -> str:
        return self.format()


def total_innings(values: list[InningsPitched]) -> InningsPitched:
    return InningsPitched(sum(v.outs for v in values))
