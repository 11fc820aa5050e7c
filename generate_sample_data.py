"""Generate realistic sample option chains for the lockup discount calculator.

This creates a CSV file with BTC-style option chains at several expiries.
"""

import argparse
import csv
from datetime import date, timedelta
from math import exp, log, sqrt
from pathlib import Path

from scipy.stats import norm

# Sample data parameters
TOKEN = "BTC"
SPOT_PRICE = 114770.0
RISK_FREE_RATE = 0.0425
STRIKE_STEP = 1000

# Days to expiry for the generated chains (monthly + quarterly style)
EXPIRY_DTES = [30, 90, 180, 270, 365]

# ATM vol term structure: short-dated slightly higher, long-dated flattening
ATM_VOL_BY_DTE = {30: 0.49, 90: 0.47, 180: 0.465, 270: 0.47, 365: 0.475}


def black_scholes_price(spot, strike, time_to_expiry, rate, vol, option_type):
    """Calculate a Black-Scholes price."""
    d1 = (log(spot / strike) + (rate + 0.5 * vol ** 2) * time_to_expiry) / (vol * sqrt(time_to_expiry))
    d2 = d1 - vol * sqrt(time_to_expiry)

    if option_type == 'call':
        return spot * norm.cdf(d1) - strike * exp(-rate * time_to_expiry) * norm.cdf(d2)
    return strike * exp(-rate * time_to_expiry) * norm.cdf(-d2) - spot * norm.cdf(-d1)


def generate_option_chain(spot, expiration, dte):
    """Generate one expiry's call/put pairs around spot."""
    rows = []
    time_to_expiry = dte / 365.0
    atm_vol = ATM_VOL_BY_DTE[dte]

    # Strikes from -20% to +20% around spot
    min_strike = int(spot * 0.80 / STRIKE_STEP) * STRIKE_STEP
    max_strike = int(spot * 1.20 / STRIKE_STEP) * STRIKE_STEP

    for strike in range(min_strike, max_strike + 1, STRIKE_STEP):
        strike = float(strike)
        moneyness = abs(strike - spot) / spot

        # Vol smile: OTM strikes carry more vol
        vol = atm_vol + moneyness * 0.25

        call = black_scholes_price(spot, strike, time_to_expiry, RISK_FREE_RATE, vol, 'call')
        put = black_scholes_price(spot, strike, time_to_expiry, RISK_FREE_RATE, vol, 'put')

        # Spreads widen away from ATM
        spread_pct = 0.01 + moneyness * 0.08

        rows.append({
            'strike': f"{strike:.0f}",
            'expiry': expiration.isoformat(),
            'call_price': f"{call:.2f}",
            'put_price': f"{put:.2f}",
            'implied_vol': f"{vol * 100:.2f}",
            'call_bid': f"{call * (1 - spread_pct):.2f}",
            'call_ask': f"{call * (1 + spread_pct):.2f}",
            'put_bid': f"{put * (1 - spread_pct):.2f}",
            'put_ask': f"{put * (1 + spread_pct):.2f}",
        })

    return rows


def main():
    """Generate sample data and save to CSV."""
    parser = argparse.ArgumentParser(description='Generate a sample option chain CSV')
    parser.add_argument('--output', default=f"data/{TOKEN}_sample_options.csv",
                        help='Output CSV path')
    parser.add_argument('--spot', type=float, default=SPOT_PRICE, help='Spot price')
    args = parser.parse_args()

    today = date.today()
    print(f"Generating sample option chains for {TOKEN} (spot ${args.spot:,.2f})...")

    all_rows = []
    for dte in EXPIRY_DTES:
        expiration = today + timedelta(days=dte)
        all_rows.extend(generate_option_chain(args.spot, expiration, dte))
        print(f"  {expiration} ({dte} DTE)")

    output_file = Path(args.output)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = ['strike', 'expiry', 'call_price', 'put_price', 'implied_vol',
                  'call_bid', 'call_ask', 'put_bid', 'put_ask']

    with open(output_file, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(all_rows)

    print(f"\n✅ Generated {len(all_rows)} call/put pairs")
    print(f"📁 Saved to: {output_file}")
    print(f"\nRun: python3 compute_discount.py {output_file} --spot {args.spot:.0f}")


if __name__ == '__main__':
    main()
