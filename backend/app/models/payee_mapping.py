from sqlalchemy import String, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id


class OfxPayeeMapping(Base, TimestampMixin):
    """
    Learned association from a bank description to an entity.

    Scoped per bank. payee_key is the normalized description (see
    services.payee_matcher.normalize_payee_key). Upserted every time a
    reconciliation is confirmed against a posting with a known entity.
    """

    __tablename__ = "ofx_payee_mappings"
    __table_args__ = (
        UniqueConstraint("bank_id", "payee_key"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    bank_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("banks.id"), nullable=False
    )
    payee_key: Mapped[str] = mapped_column(String(500), nullable=False)
    entity_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("entities.id"), nullable=False
    )
    confidence: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)

    # Relationships
    entity: Mapped["Entity"] = relationship("Entity")

    def __repr__(self) -> str:
        return f"<OfxPayeeMapping(bank={self.bank_id}, key='{self.payee_key}', entity={self.entity_id})>"
