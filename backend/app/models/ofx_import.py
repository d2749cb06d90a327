import enum
from datetime import date
from sqlalchemy import String, Integer, Date, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, new_id


class ImportStatus(enum.Enum):
    """Outcome recorded for an uploaded statement file."""
    IMPORTED = "imported"
    PARTIAL = "partial"
    ERROR = "error"


class OfxImport(Base, TimestampMixin):
    """
    Audit row for an uploaded statement file.

    file_hash is unique: the same file is recorded once no matter how many
    times it is uploaded.
    """

    __tablename__ = "ofx_imports"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    bank_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("banks.id"), nullable=False
    )
    file_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Statement range as declared in the file (DTSTART/DTEND)
    from_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    to_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    total_transactions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[ImportStatus] = mapped_column(
        Enum(ImportStatus), nullable=False, default=ImportStatus.IMPORTED
    )
    error_message: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    def __repr__(self) -> str:
        return f"<OfxImport(id={self.id}, file='{self.file_name}', hash={self.file_hash[:8]})>"
