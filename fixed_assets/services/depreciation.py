# fixed_assets/services/depreciation.py

"""
======================================================
PATH: fixed_assets/services/depreciation.py
======================================================
DEPRECIATION SCHEDULE CALCULATOR (PURE)

Produces monthly depreciation for one asset:
- Lazy: each iteration walks a fresh generator, nothing is cached
- Finite: exactly `useful_life_periods` periods
- Exact: amounts are computed in cents and the final period receives the
  remainder, so the schedule always sums to cost - residual

Methods:
- straight_line:       floor(depreciable / n) per period
- declining_balance:   rate = factor / n on current book value (factor 1.5)
- double_declining:    same with factor 2.0
- units_of_production: depreciable * units_in_period / total_units

Declining switch-over rule:
- Each period compare the declining amount with straight-line over the
  remaining life (remaining depreciable / remaining periods, half-up)
- From the first period where straight-line >= declining, use straight-line
  for the rest of the life
- Amounts never take book value below residual
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from accounting.services.money import from_minor, money, to_minor

STRAIGHT_LINE = "straight_line"
DECLINING_BALANCE = "declining_balance"
DOUBLE_DECLINING = "double_declining"
UNITS_OF_PRODUCTION = "units_of_production"

METHODS = (STRAIGHT_LINE, DECLINING_BALANCE, DOUBLE_DECLINING, UNITS_OF_PRODUCTION)

DEFAULT_DECLINING_FACTORS = {
    DECLINING_BALANCE: Decimal("1.5"),
    DOUBLE_DECLINING: Decimal("2.0"),
}


class InvalidDepreciationParametersError(Exception):
    pass


@dataclass(frozen=True)
class DepreciationPeriod:
    number: int
    period_end: date
    amount: Decimal
    accumulated: Decimal
    book_value: Decimal


def month_end(start: date, offset: int) -> date:
    """Last day of the month `offset` months after start's month."""
    month_index = start.month - 1 + offset
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, calendar.monthrange(year, month)[1])


def _round_cents(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def _units_lookup(units) -> dict[int, Decimal]:
    """
    units: mapping {period_number: units} or a sequence where index 0 is period 1.
    """
    if not units:
        return {}
    if isinstance(units, dict):
        items = units.items()
    else:
        items = enumerate(units, start=1)

    out = {}
    for number, value in items:
        try:
            qty = Decimal(str(value))
        except ArithmeticError as exc:
            raise InvalidDepreciationParametersError(f"Invalid units for period {number}: {value!r}") from exc
        if qty < 0:
            raise InvalidDepreciationParametersError(f"Units for period {number} cannot be negative")
        out[int(number)] = qty
    return out


class DepreciationScheduleCalculator:
    def __init__(
        self,
        cost_basis,
        residual_value,
        useful_life_periods,
        start_date: date,
        method: str = STRAIGHT_LINE,
        units=None,
        total_units=None,
        declining_factor=None,
    ):
        try:
            self.cost_basis = money(cost_basis)
            self.residual_value = money(residual_value)
        except ValueError as exc:
            raise InvalidDepreciationParametersError(str(exc)) from exc

        if isinstance(useful_life_periods, bool) or not isinstance(useful_life_periods, int):
            raise InvalidDepreciationParametersError("useful_life_periods must be a whole number of months")
        if useful_life_periods <= 0:
            raise InvalidDepreciationParametersError("useful_life_periods must be greater than zero")

        if self.residual_value < 0:
            raise InvalidDepreciationParametersError("residual_value cannot be negative")
        if self.residual_value >= self.cost_basis:
            raise InvalidDepreciationParametersError("residual_value must be less than cost_basis")

        if not isinstance(start_date, date):
            raise InvalidDepreciationParametersError("start_date must be a date")

        if method not in METHODS:
            raise InvalidDepreciationParametersError(f"Unknown depreciation method: {method}")

        self.useful_life_periods = useful_life_periods
        self.start_date = start_date
        self.method = method

        self.factor = None
        if method in DEFAULT_DECLINING_FACTORS:
            factor = declining_factor if declining_factor is not None else DEFAULT_DECLINING_FACTORS[method]
            try:
                self.factor = Decimal(str(factor))
            except ArithmeticError as exc:
                raise InvalidDepreciationParametersError(f"Invalid declining factor: {factor!r}") from exc
            if self.factor <= 0:
                raise InvalidDepreciationParametersError("declining factor must be > 0")

        self.total_units = None
        self.units = {}
        if method == UNITS_OF_PRODUCTION:
            try:
                self.total_units = Decimal(str(total_units)) if total_units is not None else None
            except ArithmeticError as exc:
                raise InvalidDepreciationParametersError(f"Invalid total_units: {total_units!r}") from exc
            if self.total_units is None or self.total_units <= 0:
                raise InvalidDepreciationParametersError("units_of_production requires positive total_units")
            self.units = _units_lookup(units)

    @property
    def depreciable_amount(self) -> Decimal:
        return money(self.cost_basis - self.residual_value)

    def __len__(self):
        return self.useful_life_periods

    def __iter__(self):
        return self._generate()

    def _generate(self):
        cost = to_minor(self.cost_basis)
        depreciable = to_minor(self.depreciable_amount)
        n = self.useful_life_periods

        accumulated = 0
        switched = False
        cumulative_units = Decimal("0")

        for number in range(1, n + 1):
            remaining = depreciable - accumulated

            if number == n:
                amount = remaining
            elif self.method == STRAIGHT_LINE:
                amount = depreciable // n
            elif self.method == UNITS_OF_PRODUCTION:
                cumulative_units += self.units.get(number, Decimal("0"))
                target = _round_cents(Decimal(depreciable) * cumulative_units / self.total_units)
                amount = min(target, depreciable) - accumulated
            else:
                book = cost - accumulated
                declining = _round_cents(Decimal(book) * self.factor / Decimal(n))
                straight = _round_cents(Decimal(remaining) / Decimal(n - number + 1))
                if switched or straight >= declining:
                    switched = True
                    amount = straight
                else:
                    amount = declining

            amount = max(0, min(amount, remaining))
            accumulated += amount

            yield DepreciationPeriod(
                number=number,
                period_end=month_end(self.start_date, number - 1),
                amount=from_minor(amount),
                accumulated=from_minor(accumulated),
                book_value=from_minor(cost - accumulated),
            )

    def schedule(self) -> list[DepreciationPeriod]:
        return list(self)

    def periods_through(self, as_of: date) -> list[DepreciationPeriod]:
        out = []
        for period in self:
            if period.period_end > as_of:
                break
            out.append(period)
        return out
