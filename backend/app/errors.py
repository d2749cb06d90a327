"""Error types raised by the import and reconciliation services."""


class ReconciliationError(Exception):
    """Base class for all service-level errors."""


class DecodeError(ReconciliationError):
    """The uploaded bytes could not be decoded as a bank statement."""


class ParseEmptyError(ReconciliationError):
    """The statement parsed but contained no usable transactions."""


class StorageError(ReconciliationError):
    """A store read or write failed."""


class NotFoundError(ReconciliationError):
    """A referenced bank transaction or posting does not exist."""


class AlreadyReconciledError(ReconciliationError):
    """The bank transaction is already linked to a posting."""

    def __init__(self, bank_transaction_id: str):
        super().__init__(f"Bank transaction {bank_transaction_id} is already reconciled")
        self.bank_transaction_id = bank_transaction_id
