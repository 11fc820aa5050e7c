#!/usr/bin/env python3
"""Compute the lockup discount for a token from an option chain CSV.

Usage:
    python3 compute_discount.py data/BTC_sample_options.csv --spot 114770
    python3 compute_discount.py data/BTC_sample_options.csv --spot 114770 --period 6M
    python3 compute_discount.py data/BTC_sample_options.csv --spot 114770 --rate 0.0425 --as-of 2025-08-01
"""

import argparse
import sys
from datetime import datetime

from lockup_discount.analytics.discount_engine import (
    compute_dual_expiry_discount,
    compute_single_expiry_discount,
)
from lockup_discount.analytics.tenor import (
    LOCKUP_PERIOD_DAYS,
    lockup_period_to_days,
    lockup_target_date,
    risk_free_rate_for,
)
from lockup_discount.data.loaders import (
    build_dual_expiry_data,
    closest_expiry,
    group_by_expiry,
    load_engine_config,
    load_options_from_csv,
)
from lockup_discount.data.validators import validate_options_data
from lockup_discount.output.console import (
    print_discount_summary,
    print_header,
    print_per_strike_results,
    print_warnings,
)
from lockup_discount.utils.error_handling import (
    DataValidationError,
    EngineError,
    InvalidInputError,
    require_positive,
)
from lockup_discount.utils.logging_config import get_logger, setup_logging

logger = get_logger("cli")


def main():
    parser = argparse.ArgumentParser(
        description='Estimate the fair discount for a time-locked token from option prices',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One-year lockup with the fallback treasury rate
  python3 compute_discount.py data/BTC_sample_options.csv --spot 114770

  # Six-month lockup with an explicit risk-free rate
  python3 compute_discount.py data/BTC_sample_options.csv --spot 114770 --period 6M --rate 0.0423

  # Custom engine parameters
  python3 compute_discount.py data/BTC_sample_options.csv --spot 114770 --config my_params.yaml
        """
    )

    parser.add_argument('csv_file', help='Path to option chain CSV file')
    parser.add_argument('--spot', type=float, required=True, help='Current spot price')
    parser.add_argument('--period', choices=sorted(LOCKUP_PERIOD_DAYS), default='1Y',
                        help='Lockup period (default: 1Y)')
    parser.add_argument('--rate', type=float, default=None,
                        help='Risk-free rate as decimal (default: fallback rate for the period)')
    parser.add_argument('--as-of', default=None,
                        help='Valuation date YYYY-MM-DD (default: today)')
    parser.add_argument('--token', default='BTC', help='Token label for the report (default: BTC)')
    parser.add_argument('--config', default=None, help='Engine parameters YAML file')
    parser.add_argument('--log-level', default='WARNING', help='Logging level (default: WARNING)')
    parser.add_argument('--log-file', default=None, help='Optional log file path')

    args = parser.parse_args()

    setup_logging(log_level=args.log_level, log_file=args.log_file)

    try:
        as_of = datetime.strptime(args.as_of, '%Y-%m-%d').date() if args.as_of else None
    except ValueError:
        print(f"❌ Error: invalid --as-of date: {args.as_of}")
        sys.exit(1)

    try:
        require_positive(spot_price=args.spot)
    except InvalidInputError as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

    try:
        config = load_engine_config(args.config)
        contracts = load_options_from_csv(args.csv_file)
    except FileNotFoundError as e:
        print(f"❌ Error: {e}")
        sys.exit(1)
    except DataValidationError as e:
        print(f"❌ Error loading input: {e}")
        sys.exit(1)

    lockup_days = lockup_period_to_days(args.period)
    target_date = lockup_target_date(args.period, as_of)
    rate = risk_free_rate_for(args.period, args.rate, config)

    warnings = validate_options_data(contracts, args.spot, as_of)
    chains = group_by_expiry(contracts)

    print_header(args.token, args.spot, lockup_days, rate)
    print(f"  Loaded {len(contracts)} contracts across {len(chains)} expiries, "
          f"target date {target_date.isoformat()}")

    try:
        dual_data = build_dual_expiry_data(chains, target_date, as_of, config.days_per_year)
        result = compute_dual_expiry_discount(dual_data, args.spot, lockup_days, rate, config)
    except (EngineError, ValueError) as e:
        logger.warning("Dual-expiry calculation failed: %s", e)
        print(f"\n⚠ Dual-expiry calculation unavailable ({e}); using single-expiry fallback")
        try:
            expiry = closest_expiry(chains, target_date)
            result = compute_single_expiry_discount(chains[expiry], args.spot, lockup_days,
                                                    rate, config)
        except EngineError as fallback_error:
            logger.error("Single-expiry fallback failed: %s", fallback_error)
            print(f"\n❌ No discount rate could be computed: {fallback_error}")
            sys.exit(1)

    logger.info("%s discount for %s: %.2f%% (%s)", args.period, args.token,
                result.discount_pct, result.method)

    print_warnings(warnings)
    print_per_strike_results(result)
    print_discount_summary(result, args.spot)


if __name__ == '__main__':
    main()
