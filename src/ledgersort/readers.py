"""
Generic CSV statement reader.

Turns a bank or card CSV export into Transaction objects for one account,
using the column names configured for the data source in settings.yaml.
"""

import csv
import hashlib
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from dateutil import parser as date_parser

from .domain import Account, Transaction

logger = logging.getLogger(__name__)


def parse_amount(value: str, negate: bool = False) -> int:
    """
    Parse an amount like "1,234.50", "$-12.00" or "(45.99)" into signed cents.

    Raises:
        ValueError: If the value is empty or not a number
    """
    text = str(value or '').strip().replace('$', '').replace(',', '').replace(' ', '')
    if text.startswith('(') and text.endswith(')'):
        text = '-' + text[1:-1]
    if not text:
        raise ValueError("Empty amount")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")

    cents = int((amount * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    return -cents if negate else cents


def parse_row_date(value: str, date_format: Optional[str] = None) -> date:
    """
    Parse a statement date.

    With date_format the value must match it exactly (strptime); otherwise
    dateutil guesses the format, month first.
    """
    text = str(value or '').strip()
    if not text:
        raise ValueError("Empty date")

    try:
        if date_format:
            return datetime.strptime(text, date_format).date()
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid date {value!r}: {e}")


def make_transaction_id(day: date, description: str, cents: int, ordinal: int = 0) -> str:
    """
    Stable id for a statement row.

    Re-importing an overlapping export gives the same ids, so the rows are
    de-duplicated by the transaction list. Identical rows within one file are
    told apart by their ordinal.
    """
    digest = hashlib.sha1(f"{day.isoformat()}|{description}|{cents}".encode('utf-8')).hexdigest()[:12]
    base = f"{day.strftime('%Y%m%d')}-{digest}"
    return base if ordinal == 0 else f"{base}-{ordinal}"


def read_csv(path: str, source: dict, account: Optional[Account]) -> list[Transaction]:
    """
    Read one statement file.

    Args:
        path: CSV file with a header row
        source: Normalized data source entry from load_config()
        account: Account the rows belong to

    Returns:
        Transactions in file order

    Raises:
        ValueError: If a configured column is missing or a row cannot be parsed
    """
    columns = [source['date_column'], source['description_column'], source['amount_column']]
    if source.get('address_column'):
        columns.append(source['address_column'])

    transactions = []
    seen: dict[tuple, int] = {}

    with open(path, 'r', encoding='utf-8-sig', newline='') as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or []
        missing = [c for c in columns if c not in fieldnames]
        if missing:
            raise ValueError(f"{path}: missing column(s) {', '.join(missing)} (found: {', '.join(fieldnames)})")

        for row_num, row in enumerate(reader, start=2):
            if not any((v or '').strip() for v in row.values() if isinstance(v, str)):
                continue

            try:
                day = parse_row_date(row[source['date_column']], source.get('date_format'))
                cents = parse_amount(row[source['amount_column']], source.get('negate_amounts', False))
            except ValueError as e:
                raise ValueError(f"{path}, row {row_num}: {e}")

            description = ' '.join((row[source['description_column']] or '').split())
            address = ''
            if source.get('address_column'):
                address = (row[source['address_column']] or '').strip()

            key = (day, description, cents)
            ordinal = seen.get(key, 0)
            seen[key] = ordinal + 1

            transactions.append(Transaction(
                account=account,
                id=make_transaction_id(day, description, cents, ordinal),
                date=day,
                description=description,
                address=address,
                cents=cents,
            ))

    logger.debug("Read %d row(s) from %s", len(transactions), path)
    return transactions
