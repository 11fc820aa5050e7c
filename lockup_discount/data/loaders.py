"""Option chain loaders and chain assembly.

Turns already-fetched market data (CSV exports or raw per-instrument book
summaries) into OptionContract chains grouped by expiry, and builds the
DualExpiryData the engine consumes. No network access happens here.
"""

import csv
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Literal, Mapping, Sequence

import yaml

from ..analytics.engine_config import EngineConfig
from ..analytics.expiry_selector import select_expiry_pair
from ..analytics.tenor import year_fraction
from ..models.option_contract import DualExpiryData, ExpiryLeg, OptionContract
from ..utils.error_handling import DataValidationError, InsufficientExpiriesError

logger = logging.getLogger("lockup_discount.loaders")

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "default_params.yaml"

PriceType = Literal['mark', 'mid', 'last']

_MONTHS = ['JAN', 'FEB', 'MAR', 'APR', 'MAY', 'JUN',
           'JUL', 'AUG', 'SEP', 'OCT', 'NOV', 'DEC']
_EXPIRY_CODE_RE = re.compile(r'^(\d{1,2})([A-Z]{3})(\d{2})$')


def load_engine_config(config_path: str | Path | None = None) -> EngineConfig:
    """Load engine parameters from a YAML file.

    The file may hold the parameters at top level or under an ``engine`` key.

    Args:
        config_path: Path to YAML file (defaults to the packaged default_params.yaml)

    Returns:
        EngineConfig instance

    Raises:
        FileNotFoundError: If the file doesn't exist
        DataValidationError: If the YAML is not a mapping
    """
    config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.error("Config file not found: %s", config_path)
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        params = yaml.safe_load(f) or {}

    if not isinstance(params, dict):
        raise DataValidationError(f"Config file {config_path} must contain a mapping")

    logger.debug("Loaded engine config from %s", config_path)
    return EngineConfig.from_dict(params.get('engine', params))


def parse_expiry_code(code: str) -> date:
    """Parse a Deribit expiry code such as ``28MAR25`` or ``5SEP25``.

    Raises:
        ValueError: If the code is malformed
    """
    match = _EXPIRY_CODE_RE.match(code.strip().upper())
    if not match or match.group(2) not in _MONTHS:
        raise ValueError(f"Invalid expiry code: {code}")

    day, month, year = match.groups()
    return date(2000 + int(year), _MONTHS.index(month) + 1, int(day))


def format_expiry_code(expiry: date) -> str:
    """Format a date as a Deribit expiry code (inverse of parse_expiry_code)."""
    return f"{expiry.day}{_MONTHS[expiry.month - 1]}{expiry.year % 100:02d}"


def parse_expiry(value: str) -> date:
    """Parse an expiry in ISO, MM/DD/YYYY or Deribit code format."""
    value = value.strip()
    for fmt in ('%Y-%m-%d', '%m/%d/%Y'):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    try:
        return parse_expiry_code(value)
    except ValueError:
        raise ValueError(f"Invalid expiry date format: {value}") from None


@dataclass(frozen=True)
class InstrumentName:
    """Parsed option instrument name, e.g. ``BTC-28MAR25-70000-C``."""

    currency: str
    expiry: date
    strike: float
    option_type: Literal['call', 'put']


def parse_instrument_name(name: str) -> InstrumentName | None:
    """Parse an option instrument name, returning None if it isn't one."""
    parts = name.strip().split('-')
    if len(parts) != 4 or parts[3].upper() not in ('C', 'P'):
        return None

    try:
        expiry = parse_expiry_code(parts[1])
        strike = float(parts[2])
    except ValueError:
        return None

    return InstrumentName(
        currency=parts[0].upper(),
        expiry=expiry,
        strike=strike,
        option_type='call' if parts[3].upper() == 'C' else 'put',
    )


def _select_price(summary: Mapping, price_type: PriceType) -> float:
    """Pick a price from a book summary, falling back through the other types."""
    bid = summary.get('bid_price') or 0.0
    ask = summary.get('ask_price') or 0.0
    prices = {
        'mark': summary.get('mark_price') or 0.0,
        'mid': (bid + ask) / 2 if bid and ask else 0.0,
        'last': summary.get('last') or 0.0,
    }
    order = [price_type] + [p for p in ('mark', 'mid', 'last') if p != price_type]
    for key in order:
        if prices[key]:
            return prices[key]
    return 0.0


def assemble_chains(
    book_summaries: Mapping[str, Mapping],
    spot_price: float | None = None,
    price_type: PriceType = 'mark',
    max_moneyness: float = 0.5,
) -> Dict[date, List[OptionContract]]:
    """Combine per-instrument book summaries into call/put contracts by expiry.

    Args:
        book_summaries: Instrument name -> summary dict with ``mark_price``,
            ``bid_price``, ``ask_price``, ``last`` and ``mark_iv`` keys
            (a one-element list of such dicts is also accepted)
        spot_price: If given, strikes further than max_moneyness from spot are skipped
        price_type: Preferred price ('mark', 'mid' or 'last'); the others are fallbacks
        max_moneyness: Maximum |strike - spot| / spot kept

    Returns:
        Expiry -> contracts sorted by strike. Only strikes with both a
        positive call and put price are kept.
    """
    partial: Dict[tuple, dict] = {}

    for name, summary in book_summaries.items():
        parsed = parse_instrument_name(name)
        if parsed is None:
            logger.debug("Skipping non-option instrument %s", name)
            continue
        if spot_price and abs(parsed.strike - spot_price) / spot_price > max_moneyness:
            continue
        if isinstance(summary, Sequence):
            if not summary:
                continue
            summary = summary[0]

        entry = partial.setdefault((parsed.expiry, parsed.strike), {
            'strike': parsed.strike,
            'expiry': parsed.expiry,
            'call_price': 0.0,
            'put_price': 0.0,
            'implied_vol': 0.0,
        })
        side = parsed.option_type
        entry[f'{side}_price'] = _select_price(summary, price_type)
        entry[f'{side}_bid'] = summary.get('bid_price') or 0.0
        entry[f'{side}_ask'] = summary.get('ask_price') or 0.0
        entry['implied_vol'] = summary.get('mark_iv') or 0.0

    chains: Dict[date, List[OptionContract]] = {}
    incomplete = 0
    for entry in partial.values():
        if entry['call_price'] <= 0 or entry['put_price'] <= 0:
            incomplete += 1
            continue
        chains.setdefault(entry['expiry'], []).append(OptionContract(**entry))

    for contracts in chains.values():
        contracts.sort(key=lambda c: c.strike)

    logger.info("Assembled %d complete call/put pairs across %d expiries (%d incomplete skipped)",
                sum(len(c) for c in chains.values()), len(chains), incomplete)
    return chains


def load_options_from_csv(csv_path: str | Path) -> List[OptionContract]:
    """Load an option chain from CSV file.

    Expected CSV format:
        strike,expiry,call_price,put_price,implied_vol,
        call_bid,call_ask,put_bid,put_ask

    The bid/ask columns are optional. implied_vol is in percent.

    Args:
        csv_path: Path to CSV file

    Returns:
        List of OptionContract objects

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        DataValidationError: If CSV has missing columns or no valid rows
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        logger.error("CSV file not found: %s", csv_path)
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    logger.info("Loading option chain from CSV: %s", csv_path)

    contracts = []
    required_fields = {'strike', 'expiry', 'call_price', 'put_price', 'implied_vol'}

    with open(csv_path, 'r', newline='') as f:
        reader = csv.DictReader(f)

        if not required_fields.issubset(set(reader.fieldnames or [])):
            missing = required_fields - set(reader.fieldnames or [])
            logger.error("CSV missing required fields: %s", missing)
            raise DataValidationError(f"CSV missing required fields: {sorted(missing)}")

        skipped_rows = 0
        for row_num, row in enumerate(reader, start=2):  # header is row 1
            try:
                contracts.append(_parse_contract_row(row))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping row %d in %s due to error: %s",
                               row_num, csv_path.name, e)
                skipped_rows += 1

        if skipped_rows > 0:
            logger.warning("Skipped %d invalid rows in %s", skipped_rows, csv_path.name)

    if not contracts:
        logger.error("No valid contracts found in %s", csv_path)
        raise DataValidationError(f"No valid contracts found in {csv_path}")

    logger.info("Loaded %d contracts from %s", len(contracts), csv_path.name)
    return contracts


def _parse_contract_row(row: dict) -> OptionContract:
    """Parse a single CSV row into an OptionContract.

    Raises:
        ValueError: If required fields are missing or invalid
    """
    def parse_optional_float(value: str | None) -> float | None:
        value = (value or '').strip()
        if not value or value.lower() in ('null', 'none', 'nan'):
            return None
        return float(value)

    strike = float(row['strike'])
    call_price = float(row['call_price'])
    put_price = float(row['put_price'])
    implied_vol = float(row['implied_vol'])

    if strike <= 0:
        raise ValueError(f"Invalid strike: {strike}")
    if call_price <= 0 or put_price <= 0:
        raise ValueError(f"Non-positive option price (call={call_price}, put={put_price})")
    if implied_vol < 0:
        raise ValueError(f"Negative implied vol: {implied_vol}")

    quotes = {key: parse_optional_float(row.get(key))
              for key in ('call_bid', 'call_ask', 'put_bid', 'put_ask')}
    for key, value in quotes.items():
        if value is not None and value < 0:
            raise ValueError(f"Negative {key}: {value}")

    return OptionContract(
        strike=strike,
        call_price=call_price,
        put_price=put_price,
        implied_vol=implied_vol,
        expiry=parse_expiry(row['expiry']),
        **quotes,
    )


def group_by_expiry(contracts: Sequence[OptionContract]) -> Dict[date, List[OptionContract]]:
    """Group contracts by expiry date, preserving input order."""
    chains: Dict[date, List[OptionContract]] = {}
    for contract in contracts:
        chains.setdefault(contract.expiry, []).append(contract)
    return chains


def _build_leg(expiry: date, contracts: Sequence[OptionContract], as_of: date,
               days_per_year: int) -> ExpiryLeg:
    avg_iv = sum(c.implied_vol for c in contracts) / len(contracts)
    return ExpiryLeg(
        expiry=expiry.isoformat(),
        time_to_expiry=year_fraction(as_of, expiry, days_per_year),
        avg_implied_vol=avg_iv,
        contracts=tuple(contracts),
    )


def build_dual_expiry_data(
    chains: Mapping[date, Sequence[OptionContract]],
    target_date: date,
    as_of: date | None = None,
    days_per_year: int = 365,
) -> DualExpiryData:
    """Select an expiry pair for the target date and package both chains.

    Expiries on or before as_of, and expiries with no contracts, are ignored.

    Args:
        chains: Expiry -> contracts
        target_date: Lockup end date
        as_of: Valuation date (defaults to today)
        days_per_year: Day count for tenors

    Returns:
        DualExpiryData with tenors in years and average IVs in percent

    Raises:
        InsufficientExpiriesError: If fewer than two usable expiries remain
    """
    as_of = as_of or date.today()
    usable = {exp: list(c) for exp, c in chains.items() if c and exp > as_of}
    if len(usable) < 2:
        raise InsufficientExpiriesError(
            f"Need at least 2 live expiries after {as_of}, got {len(usable)}"
        )

    pair = select_expiry_pair(usable.keys(), target_date)
    short_leg = _build_leg(pair.short_expiry, usable[pair.short_expiry], as_of, days_per_year)
    long_leg = _build_leg(pair.long_expiry, usable[pair.long_expiry], as_of, days_per_year)

    logger.info("Short leg %s: %d contracts, long leg %s: %d contracts",
                short_leg.expiry, len(short_leg.contracts),
                long_leg.expiry, len(long_leg.contracts))

    return DualExpiryData(
        short_term=short_leg,
        long_term=long_leg,
        strategy=pair.strategy,
        target_time_to_expiry=year_fraction(as_of, target_date, days_per_year),
    )


def closest_expiry(chains: Mapping[date, Sequence[OptionContract]], target_date: date) -> date:
    """Expiry nearest to the target date (used by the single-expiry fallback)."""
    candidates = [exp for exp, contracts in chains.items() if contracts]
    if not candidates:
        raise InsufficientExpiriesError("No expiries with contracts available")
    return min(candidates, key=lambda exp: (abs((exp - target_date).days), exp))
