from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ..engine.context import DepositPolicy

D = Decimal

DEPOSIT_REQUIRED_ABOVE = D("500")
REDUCED_PERCENT_ABOVE = D("2000")


def calc_deposit(total: D) -> DepositPolicy:
    """
    total > 500  -> deposit required
    total > 2000 -> 25%, otherwise 50% (exactly 2000 stays at 50%)
    """
    required = total > DEPOSIT_REQUIRED_ABOVE
    percent = 25 if total > REDUCED_PERCENT_ABOVE else 50

    if required:
        amount = (total * percent / D("100")).quantize(D("1"), rounding=ROUND_HALF_UP)
    else:
        amount = D("0")

    return DepositPolicy(
        required=required,
        percent=percent,
        amount=amount,
        balance_due=total - amount,
    )
