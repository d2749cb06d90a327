from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id


class Bank(Base, TimestampMixin):
    """
    A bank account that statements are imported into.
    Each bank has its own set of imported bank transactions.
    """

    __tablename__ = "banks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    agency: Mapped[str | None] = mapped_column(String(20), nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(40), nullable=True)

    # Relationships
    transactions: Mapped[list["BankTransaction"]] = relationship(
        "BankTransaction", back_populates="bank", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Bank(id={self.id}, name='{self.name}')>"
