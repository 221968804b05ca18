from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.db import get_db
from app.models.submission import Submission, SubmissionHistory
from app.schemas.submission import (
    ReviewCreate,
    SubmissionCreate,
    SubmissionHistoryRead,
    SubmissionRead,
    SubmissionStatus,
)
from app.services import grading

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.post("/", response_model=SubmissionRead)
def create_submission(payload: SubmissionCreate, db: Session = Depends(get_db)):
    """Create the athlete's submission for a challenge, or replace the existing one."""
    row, _ = grading.submit(db, payload)
    return row


@router.get("/", response_model=list[SubmissionRead])
def list_submissions(
    athlete_id: Optional[int] = Query(None),
    challenge_id: Optional[int] = Query(None),
    status: Optional[SubmissionStatus] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(Submission)
    if athlete_id is not None:
        query = query.filter(Submission.athlete_id == athlete_id)
    if challenge_id is not None:
        query = query.filter(Submission.challenge_id == challenge_id)
    if status is not None:
        query = query.filter(Submission.status == status.value)
    # Most recent first
    return query.order_by(Submission.submitted_at.desc(), Submission.id.desc()).all()


@router.get("/{submission_id}", response_model=SubmissionRead)
def get_submission(submission_id: int, db: Session = Depends(get_db)):
    row = db.query(Submission).filter(Submission.id == submission_id).first()
    if not row:
        raise NotFound("Submission", submission_id)
    return row


@router.get("/{submission_id}/history", response_model=list[SubmissionHistoryRead])
def get_submission_history(submission_id: int, db: Session = Depends(get_db)):
    if not db.query(Submission.id).filter(Submission.id == submission_id).first():
        raise NotFound("Submission", submission_id)
    return (
        db.query(SubmissionHistory)
        .filter(SubmissionHistory.submission_id == submission_id)
        .order_by(SubmissionHistory.version)
        .all()
    )


@router.post("/{submission_id}/review", response_model=SubmissionRead)
def review_submission(submission_id: int, payload: ReviewCreate, db: Session = Depends(get_db)):
    return grading.review(db, submission_id, payload)


@router.delete("/{submission_id}")
def delete_submission(submission_id: int, db: Session = Depends(get_db)):
    grading.delete_submission(db, submission_id)
    return {"message": "Submission deleted"}
