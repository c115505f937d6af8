"""
Stock transaction types and their categories.

Shared by the server (filtering and labelling item transactions) and the
API client (building history queries and classifying local records), so
both sides agree on what "in", "out", "delete" and the rest mean. This
module must stay free of Django imports.
"""

STOCK_IN = 'STOCK_IN'
NEW_ITEM = 'NEW_ITEM'
STOCK_OUT = 'STOCK_OUT'
TRANSFER = 'TRANSFER'
TRANSFER_IN = 'TRANSFER_IN'
TRANSFER_OUT = 'TRANSFER_OUT'
BULK_TRANSFER = 'BULK_TRANSFER'
CREATE = 'CREATE'
UPDATE = 'UPDATE'
QUANTITY_UPDATE = 'QUANTITY_UPDATE'
DELETE = 'DELETE'
SOFT_DELETE = 'SOFT_DELETE'
BULK_SOFT_DELETE = 'BULK_SOFT_DELETE'
PERMANENT_DELETE = 'PERMANENT_DELETE'
RESTORE = 'RESTORE'

TRANSACTION_TYPES = (
    STOCK_IN, NEW_ITEM, STOCK_OUT, TRANSFER, TRANSFER_IN, TRANSFER_OUT, BULK_TRANSFER,
    CREATE, UPDATE, QUANTITY_UPDATE, DELETE, SOFT_DELETE, BULK_SOFT_DELETE,
    PERMANENT_DELETE, RESTORE,
)

CATEGORY_IN = 'in'
CATEGORY_OUT = 'out'
CATEGORY_TRANSFER = 'transfer'
CATEGORY_DELETE = 'delete'
CATEGORY_UPDATE = 'update'
CATEGORY_CREATE = 'create'
CATEGORY_RESTORE = 'restore'
CATEGORY_UNKNOWN = 'unknown'

# Transaction types selected when filtering by category. Deletions are not
# listed: they are matched by flag or by "DELETE" in the type name.
CATEGORY_TYPES = {
    CATEGORY_IN: [STOCK_IN, NEW_ITEM],
    CATEGORY_OUT: [STOCK_OUT],
    CATEGORY_TRANSFER: [TRANSFER, TRANSFER_IN, TRANSFER_OUT, BULK_TRANSFER],
    CATEGORY_UPDATE: [UPDATE],
    CATEGORY_CREATE: [CREATE, NEW_ITEM],
    CATEGORY_RESTORE: [RESTORE],
}

LOCAL_TRANSACTIONS_KEY = 'itemTransactions'


def is_deletion_type(transaction_type):
    return bool(transaction_type) and 'delete' in str(transaction_type).lower()


def types_for_category(category):
    """Transaction types for a category; unknown categories map to their upper-cased name"""
    if not category:
        return []
    return list(CATEGORY_TYPES.get(category, [str(category).upper()]))


def transaction_category(transaction_type, is_deletion=False, details=None):
    """
    Label a transaction with its display category.

    Deletions win over everything else. NEW_ITEM counts as stock in. A
    QUANTITY_UPDATE is "in" when its details mention an increase, else "out".
    """
    if is_deletion or is_deletion_type(transaction_type):
        return CATEGORY_DELETE
    if not transaction_type:
        return CATEGORY_UNKNOWN

    transaction_type = str(transaction_type).upper()
    if transaction_type == QUANTITY_UPDATE:
        return CATEGORY_IN if details and 'increase' in str(details).lower() else CATEGORY_OUT
    if transaction_type == NEW_ITEM:
        return CATEGORY_IN
    for category in (CATEGORY_IN, CATEGORY_OUT, CATEGORY_TRANSFER, CATEGORY_UPDATE,
                     CATEGORY_CREATE, CATEGORY_RESTORE):
        if transaction_type in CATEGORY_TYPES[category]:
            return category
    return CATEGORY_UNKNOWN


def matches_category(transaction_type, is_deletion, category):
    """True when a transaction belongs to the requested category filter"""
    if category == CATEGORY_DELETE:
        return bool(is_deletion) or is_deletion_type(transaction_type)
    if is_deletion or is_deletion_type(transaction_type):
        return False
    return str(transaction_type or '').upper() in types_for_category(category)
