"""Running per-scope totals for report columns."""

from typing import Callable, Dict

from .models import Scope, TOTALS_SCOPE_ORDER


class TotalsAccumulator:
    """
    Grand total plus one subtotal per scope for a single metric.

    The grand total always equals the sum of the five subtotals: every
    amount is parsed into a known scope before it is added anywhere.
    """

    def __init__(self):
        self.total = 0
        self._by_scope: Dict[Scope, int] = {scope: 0 for scope in TOTALS_SCOPE_ORDER}

    def add(self, amount: int, scope) -> None:
        """Add an amount to the grand total and to the subtotal of the given scope."""
        key = Scope.parse(scope)
        self._by_scope[key] += amount
        self.total += amount

    def increment(self, scope) -> None:
        self.add(1, scope)

    def subtotal(self, scope) -> int:
        return self._by_scope[Scope.parse(scope)]

    def subtotals(self) -> Dict[Scope, int]:
        """Return the scope subtotals in breakdown order."""
        return dict(self._by_scope)

    def render(self, number_format: Callable[[int], str] = str) -> str:
        """
        Render as "<total> (<scope>: <subtotal>, ...)".

        Only non-zero subtotals are listed, in the order compile, test,
        runtime, provided, system.
        """
        breakdown = [
            f"{scope.value}: {number_format(amount)}"
            for scope, amount in self._by_scope.items()
            if amount > 0
        ]
        return f"{number_format(self.total)} ({', '.join(breakdown)})"

    def __str__(self) -> str:
        return self.render()
