import enum
from datetime import date
from sqlalchemy import String, Integer, Date, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id


class PostingStatus(enum.Enum):
    """Lifecycle of a ledger posting."""
    PENDING = "pending"   # planned, not yet seen on a bank statement
    SETTLED = "settled"


class Posting(Base, TimestampMixin):
    """
    A ledger entry representing a planned or settled cash movement.

    Amounts are stored as unsigned integer cents; the direction comes from
    the account classification, not the sign.
    """

    __tablename__ = "postings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    status: Mapped[PostingStatus] = mapped_column(
        Enum(PostingStatus), nullable=False, default=PostingStatus.PENDING, index=True
    )
    occurrence_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    entity_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("entities.id"), nullable=True
    )
    account_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("accounts.id"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Written when the posting is settled through reconciliation
    bank_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("banks.id"), nullable=True
    )
    settlement_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Relationships
    entity: Mapped["Entity | None"] = relationship("Entity")
    account: Mapped["Account | None"] = relationship("Account")

    @property
    def amount(self) -> float:
        """Get amount as decimal currency units."""
        return self.amount_cents / 100.0

    def __repr__(self) -> str:
        return (
            f"<Posting(id={self.id}, date={self.occurrence_date}, "
            f"amount={self.amount:.2f}, status={self.status.value})>"
        )
