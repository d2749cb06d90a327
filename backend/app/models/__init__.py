from .base import Base
from .bank import Bank
from .entity import Entity
from .account import Account
from .posting import Posting, PostingStatus
from .bank_transaction import BankTransaction
from .ofx_import import OfxImport, ImportStatus
from .reconciliation import Reconciliation, MatchType
from .payee_mapping import OfxPayeeMapping

__all__ = [
    "Base",
    "Bank",
    "Entity",
    "Account",
    "Posting",
    "PostingStatus",
    "BankTransaction",
    "OfxImport",
    "ImportStatus",
    "Reconciliation",
    "MatchType",
    "OfxPayeeMapping",
]
