from datetime import date
from sqlalchemy import String, Integer, Date, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id


class BankTransaction(Base, TimestampMixin):
    """
    One line of an imported bank statement.

    (bank_id, fit_id) is the dedup key. Negative amounts = debit.
    Rows are created by imports and never updated afterwards.
    """

    __tablename__ = "bank_transactions"
    __table_args__ = (
        UniqueConstraint("bank_id", "fit_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    bank_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("banks.id"), nullable=False, index=True
    )
    posted_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    fit_id: Mapped[str] = mapped_column(String(255), nullable=False)
    check_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    ofx_file_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    raw: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # Relationships
    bank: Mapped["Bank"] = relationship("Bank", back_populates="transactions")
    reconciliations: Mapped[list["Reconciliation"]] = relationship(
        "Reconciliation", back_populates="bank_transaction"
    )

    @property
    def amount(self) -> float:
        """Get amount as decimal currency units."""
        return self.amount_cents / 100.0

    def __repr__(self) -> str:
        return (
            f"<BankTransaction(id={self.id}, date={self.posted_date}, "
            f"amount={self.amount:.2f}, description='{self.description}')>"
        )
