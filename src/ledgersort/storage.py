"""
YAML persistence for ledgersort documents.

Document layout:

    version: 1
    accounts:
      - id: checking
        name: Bank of America Checking
        short_name: BoA Checking
        type: CHECKING_ACCOUNT
        institution: Bank of America
        number_hashes: [<sha3-256 hex>, ...]
    categories:              # only categories that differ from the built-in set
      - id: transfer
        name: Transfer
        type: BALANCED
        color: "#00838f"
        detectors:           # only detectors that differ; mirrors are never stored
          - id: transfer-savings
            vendor: ""
            description: Savings
            pattern: "TRANSFER TO SAV.*"
            cents_min: 0
            cents_max: 0
            matches: "TRANSFER FROM CHK.*"   # balanced categories only
    transactions:
      - id: "20240105-001"
        account: checking
        date: 2024-01-05
        description: ...
        address: ...
        cents: -4599
        note: ""
        category_detector: groceries-whole-foods

Loading always starts from the built-in categories and overlays the saved
ones. Any unresolvable reference aborts the whole load with DocumentLoadError.
"""

import logging
import os
from typing import Optional, TYPE_CHECKING

import yaml

from .categories import Categories, Category
from .detectors import NULL_DETECTOR, CategoryDetector
from .domain import Account, AccountType, CategoryType, Transaction
from .errors import DocumentLoadError

if TYPE_CHECKING:
    from .document import Document

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


# =============================================================================
# CATEGORIES
# =============================================================================

def detector_to_dict(detector: CategoryDetector) -> dict:
    data = {
        'id': detector.id,
        'vendor': detector.vendor,
        'description': detector.description,
        'pattern': detector.pattern,
        'cents_min': detector.cents_min,
        'cents_max': detector.cents_max,
    }
    if detector.matching_pattern is not None:
        data['matches'] = detector.matching_pattern
    return data


def category_to_dict(category: Category, updates_only: bool = False) -> dict:
    """
    Serialize a category.

    Derived (mirror) detectors are skipped; they are rebuilt from their
    primary on load. With updates_only, detectors identical to the built-in
    ones are skipped as well.
    """
    registry = category.registry
    detectors = []
    for detector in category.detectors:
        if detector.is_derived:
            continue
        if updates_only and registry.is_detector_same_as_builtin(detector):
            continue
        detectors.append(detector_to_dict(detector))

    return {
        'id': category.id,
        'name': category.name,
        'type': category.type.name,
        'color': category.color,
        'detectors': detectors,
    }


def categories_to_dict(categories: Categories, updates_only: bool = False) -> list[dict]:
    """Serialize all categories, or only those that differ from the baseline."""
    result = []
    for category in categories:
        if updates_only and categories.is_same_as_builtin(category):
            continue
        result.append(category_to_dict(category, updates_only))
    return result


def _detector_from_dict(category: Category, data: dict) -> CategoryDetector:
    if not isinstance(data, dict):
        raise ValueError("detector entry must be a mapping")
    if 'id' not in data:
        raise ValueError("'id' is required")
    if 'pattern' not in data:
        raise ValueError("'pattern' is required")

    detector_id = str(data['id'])
    pattern = data['pattern']
    vendor = data.get('vendor') or ''
    description = data.get('description') or ''
    cents_min = int(data.get('cents_min', 0) or 0)
    cents_max = int(data.get('cents_max', 0) or 0)
    matches = data.get('matches')

    if matches is not None and not category.is_balanced:
        raise ValueError("'matches' is supported only for balanced categories")
    if matches is None and category.is_balanced:
        raise ValueError("'matches' must be present in balanced categories")

    # Update in place if the detector already exists (built-in overlay)
    detector = category.get_detector(detector_id)
    if detector is None:
        if category.registry.get_detector(detector_id) is not None:
            raise ValueError(f"detector id '{detector_id}' is already used outside category '{category.id}'")
        return category.create_detector(
            detector_id, vendor, description, pattern, cents_min, cents_max, matches
        )

    if detector.is_derived:
        raise ValueError(f"'{detector_id}' is a derived mirror detector and cannot be stored")

    detector.set_pattern(pattern)
    if matches is not None:
        detector.set_matching_pattern(matches)
    detector.set_vendor(vendor)
    detector.set_description(description)
    detector.set_cents_range(cents_min, cents_max)
    return detector


def _category_from_dict(categories: Categories, data: dict) -> Category:
    if not isinstance(data, dict):
        raise ValueError("category entry must be a mapping")
    for field in ('id', 'name', 'type'):
        if field not in data:
            raise ValueError(f"'{field}' is required")

    category_id = str(data['id'])
    category_type = CategoryType(str(data['type']).upper())
    color = data.get('color', '#888888')

    # Check if the category already exists, and if so, update it
    category = categories.get(category_id)
    if category is None:
        category = Category(categories, category_id, data['name'], category_type, color)
    else:
        if category.type != category_type:
            raise DocumentLoadError(
                f"Category '{category_id}' cannot change its type "
                f"(from {category.type.name} to {category_type.name})"
            )
        category.name = data['name']
        category.color = color

    for j, detector_data in enumerate(data.get('detectors') or []):
        try:
            _detector_from_dict(category, detector_data)
        except ValueError as e:
            raise DocumentLoadError(f"Detector #{j+1}: {e}") from e

    return category


def update_categories_from_dict(categories: Categories, data: Optional[dict]) -> Categories:
    """
    Overlay the 'categories' entries of a mapping onto a registry.

    Raises:
        DocumentLoadError: If an entry is malformed or conflicts with the registry
    """
    if not data:
        return categories

    with categories.lock:
        for i, entry in enumerate(data.get('categories') or []):
            try:
                _category_from_dict(categories, entry)
            except (ValueError, KeyError, TypeError) as e:
                raise DocumentLoadError(f"Category #{i+1}: {e}") from e

    return categories


# =============================================================================
# ACCOUNTS AND TRANSACTIONS
# =============================================================================

def account_to_dict(account: Account) -> dict:
    return {
        'id': account.id,
        'name': account.name,
        'short_name': account.short_name,
        'type': account.type.name,
        'institution': account.institution,
        'number_hashes': list(account.number_hashes),
    }


def account_from_dict(data: dict) -> Account:
    if not isinstance(data, dict):
        raise ValueError("account entry must be a mapping")
    for field in ('id', 'name', 'type'):
        if field not in data:
            raise ValueError(f"'{field}' is required")

    return Account(
        id=str(data['id']),
        name=data['name'],
        type=AccountType(str(data['type']).upper()),
        short_name=data.get('short_name') or '',
        institution=data.get('institution') or '',
        number_hashes=list(data.get('number_hashes') or []),
    )


def transaction_to_dict(transaction: Transaction) -> dict:
    data = {'id': transaction.id}
    if transaction.account is not None:
        data['account'] = transaction.account.id
    data.update({
        'date': transaction.date.isoformat(),
        'description': transaction.description,
        'address': transaction.address,
        'cents': transaction.cents,
        'note': transaction.note,
    })
    if transaction.category_detector is not NULL_DETECTOR:
        data['category_detector'] = transaction.category_detector.id
    return data


# =============================================================================
# DOCUMENTS
# =============================================================================

def document_to_dict(document: 'Document') -> dict:
    """Serialize a document, storing categories as updates against the baseline."""
    with document.lock:
        return {
            'version': FORMAT_VERSION,
            'accounts': [account_to_dict(a) for a in document.accounts],
            'categories': categories_to_dict(document.categories, updates_only=True),
            'transactions': [transaction_to_dict(t) for t in document.transactions],
        }


def document_from_dict(data: Optional[dict], baseline: Optional[Categories] = None) -> 'Document':
    """
    Build a document from its serialized form.

    Transactions are classified as they are loaded (so transfer links are
    rebuilt), then the stored rule assignments are restored.

    Raises:
        DocumentLoadError: On any malformed entry or dangling reference
    """
    from .document import Document

    document = Document(baseline=baseline)
    if not data:
        return document
    if not isinstance(data, dict):
        raise DocumentLoadError("A document must be a mapping")

    for i, entry in enumerate(data.get('accounts') or []):
        try:
            document.accounts.add(account_from_dict(entry))
        except (ValueError, KeyError, TypeError) as e:
            raise DocumentLoadError(f"Account #{i+1}: {e}") from e

    update_categories_from_dict(document.categories, data)

    categories = document.categories
    transactions = document.transactions
    assignments = []

    for i, entry in enumerate(data.get('transactions') or []):
        try:
            if not isinstance(entry, dict):
                raise ValueError("transaction entry must be a mapping")
            for field in ('id', 'date', 'cents'):
                if field not in entry:
                    raise ValueError(f"'{field}' is required")

            account = None
            if entry.get('account') is not None:
                account = document.accounts.get(str(entry['account']))
                if account is None:
                    raise ValueError(f"unknown account '{entry['account']}'")

            detector = None
            if entry.get('category_detector') is not None:
                detector = categories.get_detector(str(entry['category_detector']))
                if detector is None:
                    raise ValueError(f"unknown category detector '{entry['category_detector']}'")

            transaction = Transaction(
                account=account,
                id=str(entry['id']),
                date=entry['date'],
                description=entry.get('description') or '',
                address=entry.get('address') or '',
                cents=int(entry['cents']),
                note=entry.get('note') or '',
            )
        except (ValueError, KeyError, TypeError) as e:
            raise DocumentLoadError(f"Transaction #{i+1}: {e}") from e

        categories.detect_categories(transaction, transactions)
        transactions.add(transaction)
        if detector is not None:
            assignments.append((transaction, detector))

    for transaction, detector in assignments:
        transaction.category_detector = detector

    logger.info(
        "Loaded document: %d accounts, %d categories, %d transactions",
        len(document.accounts), len(categories), len(transactions)
    )
    return document


def load_document(path: str, baseline: Optional[Categories] = None) -> 'Document':
    """
    Load a document from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        DocumentLoadError: If the YAML is malformed or references do not resolve
    """
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise DocumentLoadError(f"Error parsing {path}: {e}") from e

    document = document_from_dict(data, baseline)
    document.path = path
    return document


def save_document(document: 'Document', path: Optional[str] = None) -> str:
    """Write a document to a YAML file and remember the path on the document."""
    path = path or document.path
    if not path:
        raise ValueError("No path given and the document has never been saved")

    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(document_to_dict(document), f, sort_keys=False, allow_unicode=True)

    document.path = path
    logger.info("Saved document to %s", path)
    return path
