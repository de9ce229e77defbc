# routes/submissions.py
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from models.submission import PENDING, SubmissionCreate, SubmissionGrade
from .auth import get_current_user
from .dependencies import get_db

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

router = APIRouter(tags=["submissions"])


@router.post("/submissions")
async def create_submission(submission: SubmissionCreate, db=Depends(get_db)):
    try:
        inserted_id = await db.submissions.insert_one(submission.model_dump())
    except Exception as e:
        logger.error(f"Failed to store submission from {submission.email}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
    logger.info(f"Submission {inserted_id} stored for {submission.email}")
    return {"acknowledged": True, "insertedId": inserted_id}


@router.get("/submissions")
async def list_pending_submissions(db=Depends(get_db)):
    try:
        return await db.submissions.find({"status": PENDING})
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/submission/{id}")
async def get_submission(id: str, db=Depends(get_db)):
    try:
        return await db.submissions.find_one(id)
    except InvalidId:
        raise HTTPException(status_code=400, detail=f"Invalid submission id: {id}")
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/submission/{id}")
async def grade_submission(id: str, grade: SubmissionGrade, db=Depends(get_db)):
    fields = grade.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="Nothing to update")
    try:
        result = await db.submissions.update_one(id, fields)
    except InvalidId:
        raise HTTPException(status_code=400, detail=f"Invalid submission id: {id}")
    except Exception as e:
        logger.error(f"Failed to grade submission {id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
    logger.info(f"Submission {id} graded: {fields.get('status')}")
    return result


@router.get("/my-assignment")
async def list_my_submissions(
    email: str = Query(...),
    current_user: dict = Depends(get_current_user),
    db=Depends(get_db),
):
    if current_user.get("email") != email:
        logger.warning(f"{current_user.get('email')} asked for submissions of {email}")
        raise HTTPException(status_code=400, detail="You can only view your own submissions")
    try:
        return await db.submissions.find({"email": email})
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
