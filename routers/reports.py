import logging
import uuid

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

import storage
from auth import get_current_user
from database import get_db
from models import Report, User
from report_builder import aggregate_report_data, render_pdf
from schemas import ReportGenerate, iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])


def _report_response(r):
    return {"id": str(r.id), "from_date": iso(r.from_date), "to_date": iso(r.to_date),
            "created_at": iso(r.created_at), "download_url": storage.presign_download(r.pdf_key)}


def _heatmap_bytes(key: str | None) -> bytes | None:
    if not key:
        return None
    try:
        return storage.get_object_bytes(key)
    except (BotoCoreError, ClientError) as e:
        logger.warning("Heatmap image %s unavailable, report rendered without it: %s", key, e)
        return None


@router.post("/generate")
def generate_report(body: ReportGenerate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if body.end_date < body.start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")
    if body.heatmap_image_key and not storage.is_user_upload(user.id, body.heatmap_image_key):
        raise HTTPException(status_code=400, detail="Invalid heatmap image key")

    data = aggregate_report_data(db, user, body.start_date, body.end_date)
    pdf = render_pdf(data, heatmap_png=_heatmap_bytes(body.heatmap_image_key))

    key = storage.report_key(user.id)
    storage.put_pdf(key, pdf)

    report = Report(id=uuid.uuid4(), user_id=user.id, from_date=body.start_date, to_date=body.end_date, pdf_key=key)
    db.add(report); db.commit(); db.refresh(report)
    logger.info("Generated report %s (%d bytes) for user %s", report.id, len(pdf), user.id)
    return {"report": _report_response(report)}


@router.get("")
@router.get("/", include_in_schema=False)
def list_reports(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    reports = db.query(Report).filter(Report.user_id == user.id).order_by(Report.created_at.desc()).all()
    return {"reports": [_report_response(r) for r in reports]}


@router.delete("/{report_id}")
def delete_report(report_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    report = db.query(Report).filter(Report.id == report_id, Report.user_id == user.id).first()
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    storage.delete_quietly(report.pdf_key)
    db.delete(report); db.commit()
    return {"success": True}
