from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import ReconciliationSettings, get_settings
from ..database import get_db
from ..models import Bank
from ..schemas.import_schemas import OFXImportResponse
from ..services.import_service import ImportFailed, OfxImportService
from ..stores import sql_stores

router = APIRouter()


@router.post("/ofx", response_model=OFXImportResponse)
def import_ofx(
    bank_id: str = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    settings: ReconciliationSettings = Depends(get_settings),
):
    """
    Import an OFX/QFX statement into a bank.

    Already imported transactions are skipped. Returns status DUPLICATE
    when nothing new was found and HTTP 400 with status ERROR when the
    file could not be imported.
    """
    bank = db.query(Bank).filter(Bank.id == bank_id).first()
    if not bank:
        raise HTTPException(status_code=404, detail="Bank not found")

    service = OfxImportService(
        sql_stores(db),
        reject_duplicate_files=settings.reject_duplicate_files,
    )
    outcome = service.ingest(bank_id, file.file.read(), file.filename or "statement.ofx")

    response = OFXImportResponse.from_outcome(outcome)
    if isinstance(outcome, ImportFailed):
        return JSONResponse(status_code=400, content=response.model_dump(mode="json"))
    return response
