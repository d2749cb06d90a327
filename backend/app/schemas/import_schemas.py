from datetime import date
from pydantic import BaseModel

from ..services.import_service import ImportOutcome, ImportFailed


class ImportCountsResponse(BaseModel):
    """Transaction counts for an import."""
    total: int
    new: int
    existing: int


class OFXImportResponse(BaseModel):
    """Response from an OFX upload."""
    status: str  # "SUCCESS" | "DUPLICATE" | "ERROR"
    message: str | None = None
    file_hash: str | None = None
    format: str | None = None  # "sgml" | "xml"
    from_date: date | None = None
    to_date: date | None = None
    counts: ImportCountsResponse | None = None

    @classmethod
    def from_outcome(cls, outcome: ImportOutcome):
        if isinstance(outcome, ImportFailed):
            return cls(status=outcome.status, message=outcome.message)

        statement = outcome.statement
        counts = outcome.counts
        return cls(
            status=outcome.status,
            message=getattr(outcome, "message", None),
            file_hash=outcome.file_hash,
            format=statement.format if statement else None,
            from_date=statement.from_date if statement else None,
            to_date=statement.to_date if statement else None,
            counts=ImportCountsResponse(
                total=counts.total, new=counts.new, existing=counts.existing
            ) if counts else None,
        )
