"""
Monthly income and expense summaries.

Aggregates classified transactions into per-category monthly totals (in
cents), the numbers the trend charts of a ledger are drawn from.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from .categories import Categories
from .domain import CategoryType, Transaction

# Category types that count toward monthly expense (money leaving)
EXPENSE_TYPES = (CategoryType.EXPENSE, CategoryType.EXTERNAL)


def month_range(start: date, end: date) -> list[str]:
    """Every month from start to end inclusive, as YYYY-MM strings."""
    months = []
    current = start.replace(day=1)
    last = end.replace(day=1)
    while current <= last:
        months.append(current.strftime('%Y-%m'))
        current = current + relativedelta(months=1)
    return months


def summarize_by_month(transactions: Iterable[Transaction], categories: Categories,
                       start: Optional[date] = None, end: Optional[date] = None) -> dict:
    """
    Total transactions per category and month.

    Args:
        transactions: Transactions to aggregate
        categories: Registry giving the category order
        start: First day to include (default: earliest transaction)
        end: Last day to include (default: latest transaction)

    Returns:
        Dictionary with:
        - months: YYYY-MM strings, with no gaps
        - categories: one row per category that has transactions, in
          registry order: {'id', 'name', 'type', 'totals', 'total', 'count'}
        - uncategorized: the same row shape for transactions without a category
        - income / expense / net: {month: cents}. Balanced (transfer)
          categories are left out of all three.
    """
    selected = [
        t for t in transactions
        if (start is None or t.date >= start) and (end is None or t.date <= end)
    ]

    result = {
        'months': [],
        'categories': [],
        'uncategorized': {'totals': {}, 'total': 0, 'count': 0},
        'income': {},
        'expense': {},
        'net': {},
    }
    if not selected:
        return result

    first = start or min(t.date for t in selected)
    last = end or max(t.date for t in selected)
    months = month_range(first, last)
    result['months'] = months

    by_category = defaultdict(lambda: defaultdict(int))
    counts = defaultdict(int)
    uncategorized = defaultdict(int)

    for t in selected:
        if t.category is None:
            uncategorized[t.month] += t.cents
            result['uncategorized']['count'] += 1
        else:
            by_category[t.category.id][t.month] += t.cents
            counts[t.category.id] += 1

    income = defaultdict(int)
    expense = defaultdict(int)

    for category in categories:
        if category.id not in by_category:
            continue
        totals = {m: by_category[category.id].get(m, 0) for m in months}
        result['categories'].append({
            'id': category.id,
            'name': category.name,
            'type': category.type.name,
            'totals': totals,
            'total': sum(totals.values()),
            'count': counts[category.id],
        })

        if category.type == CategoryType.INCOME:
            for m, cents in totals.items():
                income[m] += cents
        elif category.type in EXPENSE_TYPES:
            for m, cents in totals.items():
                expense[m] += cents

    result['uncategorized']['totals'] = {m: uncategorized.get(m, 0) for m in months}
    result['uncategorized']['total'] = sum(uncategorized.values())
    result['income'] = {m: income.get(m, 0) for m in months}
    result['expense'] = {m: expense.get(m, 0) for m in months}
    result['net'] = {m: income.get(m, 0) + expense.get(m, 0) for m in months}

    return result


def format_cents(cents: int) -> str:
    sign = '-' if cents < 0 else ''
    return f"{sign}${abs(cents) / 100:,.2f}"


def format_summary(summary: dict, title: str = 'Monthly Summary') -> str:
    """
    Format a monthly summary as a text table.

    Args:
        summary: Result from summarize_by_month()
        title: Heading line

    Returns:
        Formatted string, one column per month plus a total column
    """
    months = summary['months']
    lines = [title, "=" * 60, ""]

    if not months:
        lines.append("No transactions in range.")
        return "\n".join(lines)

    name_width = max([len(r['name']) for r in summary['categories']] + [len('Uncategorized'), 10])
    header = f"{'Category':<{name_width}}" + "".join(f" {m:>12}" for m in months) + f" {'Total':>14}"
    lines.append(header)
    lines.append("-" * len(header))

    def row(name, totals, total):
        return (f"{name:<{name_width}}"
                + "".join(f" {format_cents(totals[m]):>12}" for m in months)
                + f" {format_cents(total):>14}")

    for r in summary['categories']:
        lines.append(row(r['name'], r['totals'], r['total']))

    if summary['uncategorized']['count']:
        u = summary['uncategorized']
        lines.append(row('Uncategorized', u['totals'], u['total']))

    lines.append("-" * len(header))
    for label in ('income', 'expense', 'net'):
        totals = summary[label]
        lines.append(row(label.capitalize(), totals, sum(totals.values())))

    return "\n".join(lines)
