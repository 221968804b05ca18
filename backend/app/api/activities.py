import os
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from app.api.challenges import check_activity
from app.db import get_db
from app.schemas.activity import ActivityCheck
from app.services.activity_files import ActivityFileError, parse_fit, parse_gpx

router = APIRouter(prefix="/activities", tags=["activities"])


@router.post("/parse", response_model=ActivityCheck)
def parse_activity_file(
    file: UploadFile = File(...),
    challenge_id: Optional[int] = Query(None, description="Validate against this challenge"),
    db: Session = Depends(get_db),
):
    """Summarize an exported .gpx or .fit file (e.g. from Garmin Connect)."""
    filename = file.filename or "upload"
    name, ext = os.path.splitext(filename)
    ext = ext.lower()
    if ext not in [".gpx", ".fit"]:
        raise HTTPException(status_code=400, detail="Only .gpx or .fit files are supported")

    data = file.file.read()
    try:
        if ext == ".gpx":
            record = parse_gpx(data.decode("utf-8"), name=name)
        else:
            record = parse_fit(data, name=name)
    except (ActivityFileError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid file: {e}")

    return check_activity(db, record, challenge_id)
