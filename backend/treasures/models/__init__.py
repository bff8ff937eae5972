from .catalog import Watch, WATCH_CATEGORIES
from .users import User, CartLine, PurchaseRecord, SavedAddress, USER_ROLES, USER_SEXES
from .branches import Branch
from .auth import SessionToken

__all__ = [
    'Watch', 'WATCH_CATEGORIES',
    'User', 'CartLine', 'PurchaseRecord', 'SavedAddress', 'USER_ROLES', 'USER_SEXES',
    'Branch',
    'SessionToken',
]
