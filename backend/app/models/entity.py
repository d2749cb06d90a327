from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, new_id


class Entity(Base, TimestampMixin):
    """A supplier, customer or other counterparty referenced by postings."""

    __tablename__ = "entities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    document: Mapped[str | None] = mapped_column(String(20), nullable=True)  # CNPJ/CPF

    def __repr__(self) -> str:
        return f"<Entity(id={self.id}, name='{self.name}')>"
