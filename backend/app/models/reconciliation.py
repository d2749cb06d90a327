import enum
from sqlalchemy import String, Integer, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id


class MatchType(enum.Enum):
    """How a reconciliation was confirmed."""
    AUTO = "auto"
    MANUAL = "manual"


class Reconciliation(Base, TimestampMixin):
    """
    Link between one bank transaction and one posting.

    At most one reconciliation per bank transaction; the service checks
    this before inserting.
    """

    __tablename__ = "reconciliations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    bank_transaction_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("bank_transactions.id"), nullable=False, index=True
    )
    posting_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("postings.id"), nullable=False, index=True
    )
    match_type: Mapped[MatchType] = mapped_column(
        Enum(MatchType), nullable=False, default=MatchType.MANUAL
    )
    match_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Relationships
    bank_transaction: Mapped["BankTransaction"] = relationship(
        "BankTransaction", back_populates="reconciliations"
    )
    posting: Mapped["Posting"] = relationship("Posting")

    def __repr__(self) -> str:
        return (
            f"<Reconciliation(id={self.id}, bank_tx={self.bank_transaction_id}, "
            f"posting={self.posting_id}, type={self.match_type.value})>"
        )
