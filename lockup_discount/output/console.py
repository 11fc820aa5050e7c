"""Console output formatter for lockup discount results."""

from typing import List

from ..models.discount import DiscountCalculation


def print_header(token: str, spot_price: float, lockup_days: int, risk_free_rate: float):
    """Print calculation session header."""
    print("\n" + "=" * 80)
    print(f"  LOCKUP DISCOUNT - {token}")
    print(f"  Spot Price: ${spot_price:,.2f}  |  Lockup: {lockup_days} days  |  "
          f"Risk-free: {risk_free_rate:.2%}")
    print("=" * 80)


def print_per_strike_results(result: DiscountCalculation):
    """Print the per-strike table.

    Output format:
        One row per priced strike with discounts, vol and weight
    """
    if not result.per_strike_results:
        print("No strikes priced.")
        return

    print("\nPer-Strike Results:")
    print("-" * 100)

    header = (
        f"{'#':>3} {'Strike':>10} {'Dist':>8} {'Call %':>8} {'Put %':>8} "
        f"{'Call $':>11} {'Put $':>11} {'Vol %':>7} {'Weight':>7}  {'Expiry'}"
    )
    print(header)
    print("-" * 100)

    for rank, calc in enumerate(result.per_strike_results, start=1):
        print(
            f"{rank:>3} {calc.strike:>10,.0f} {calc.atm_distance:>8,.0f} "
            f"{calc.call_discount_pct:>8.2f} {calc.put_discount_pct:>8.2f} "
            f"{calc.theoretical_call_price:>11,.2f} {calc.theoretical_put_price:>11,.2f} "
            f"{calc.extrapolated_vol_pct:>7.1f} {calc.weight:>7.3f}  {calc.expiry}"
        )

    print("-" * 100)


def print_discount_summary(result: DiscountCalculation, spot_price: float):
    """Print the weighted discount summary."""
    print(f"\nMethod: {result.method}")
    if result.low_confidence:
        print("  ⚠ Single-expiry fallback: lower-confidence estimate")

    print(f"\nWeighted Discount ({result.total_contracts_used} strikes):")
    print(f"  Call discount:        {result.call_discount_pct:.2f}%")
    print(f"  Put discount:         {result.put_discount_pct:.2f}%")
    print(f"  Annualized rate:      {result.annualized_rate_pct:.2f}%")
    print(f"  Extrapolated vol:     {result.extrapolated_vol_pct:.1f}%")
    print(f"\n  Theoretical call:     ${result.theoretical_call_price:,.2f}")
    print(f"  Theoretical put:      ${result.theoretical_put_price:,.2f}")
    print(f"  Fair value:           ${result.fair_value:,.2f} (spot ${spot_price:,.2f})")
    print("=" * 80 + "\n")


def print_warnings(warnings: List[str]):
    """Print data quality warnings, if any."""
    if not warnings:
        return
    print("\nData warnings:")
    for warning in warnings:
        print(f"  - {warning}")
