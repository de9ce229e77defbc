# routes/assignments.py
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
import logging

from database import page_window
from models.assignment import DIFFICULTIES, AssignmentFields, AssignmentPage
from storage import UploadError
from .auth import get_current_user
from .dependencies import get_db, get_storage

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

router = APIRouter(tags=["assignments"])


def assignment_form(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    difficulty: Optional[str] = Form(None),
    marks: Optional[float] = Form(None),
    thumbnailUrl: Optional[str] = Form(None),
) -> AssignmentFields:
    return AssignmentFields(
        title=title,
        description=description,
        date=date,
        difficulty=difficulty,
        marks=marks,
        thumbnailUrl=thumbnailUrl,
    )


async def upload_thumb(storage, thumb: Optional[UploadFile]) -> Optional[str]:
    # Browsers post an empty file part when nothing was picked
    if thumb is None or not thumb.filename:
        return None
    if storage is None:
        raise UploadError("Thumbnail storage is not configured")
    data = await thumb.read()
    return await storage.upload(data, thumb.filename, thumb.content_type)


@router.post("/assignment")
async def create_assignment(
    fields: AssignmentFields = Depends(assignment_form),
    thumb: Optional[UploadFile] = File(None),
    db=Depends(get_db),
    storage=Depends(get_storage),
):
    record = fields.model_dump(exclude_none=True)
    try:
        uploaded = await upload_thumb(storage, thumb)
        if uploaded:
            record["uploadedThumb"] = uploaded
        record["createdAt"] = datetime.now(timezone.utc)
        inserted_id = await db.assignments.insert_one(record)
    except Exception as e:
        logger.error(f"Failed to create assignment: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
    logger.info(f"Created assignment {inserted_id}")
    return {"acknowledged": True, "insertedId": inserted_id}


@router.get("/all-assignment", response_model=AssignmentPage)
async def list_assignments(
    difficulty: Optional[str] = None,
    page: int = Query(1, ge=1),
    db=Depends(get_db),
):
    query = {}
    if difficulty and difficulty != "all":
        if difficulty not in DIFFICULTIES:
            raise HTTPException(status_code=400, detail=f"Invalid difficulty: {difficulty}")
        query["difficulty"] = difficulty

    skip, limit = page_window(page)
    try:
        total = await db.assignments.count_documents(query)
        data = await db.assignments.find(query, sort=[("createdAt", -1)], skip=skip, limit=limit)
    except Exception as e:
        logger.error(f"Failed to list assignments: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"total": total, "data": data}


@router.get("/assignment/{id}")
async def get_assignment(id: str, db=Depends(get_db)):
    try:
        # Absent records come back as null with 200
        return await db.assignments.find_one(id)
    except InvalidId:
        raise HTTPException(status_code=400, detail=f"Invalid assignment id: {id}")
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/assignment/{id}")
async def update_assignment(
    id: str,
    fields: AssignmentFields = Depends(assignment_form),
    thumb: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
    db=Depends(get_db),
    storage=Depends(get_storage),
):
    if not ObjectId.is_valid(id):
        raise HTTPException(status_code=400, detail=f"Invalid assignment id: {id}")
    update = fields.model_dump()
    try:
        uploaded = await upload_thumb(storage, thumb)
        if uploaded:
            update["uploadedThumb"] = uploaded
        result = await db.assignments.update_one(
            id, update, upsert=True, on_insert={"createdAt": datetime.now(timezone.utc)}
        )
    except Exception as e:
        logger.error(f"Failed to update assignment {id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
    logger.info(f"Assignment {id} updated by {current_user.get('email')}")
    return result


@router.delete("/rm-assignment/{id}")
async def delete_assignment(
    id: str,
    email: str = Query(...),
    current_user: dict = Depends(get_current_user),
    db=Depends(get_db),
):
    # Ownership is the caller's own claim; the record stores no owner to compare against.
    if current_user.get("email") != email:
        logger.warning(f"{current_user.get('email')} tried to delete assignment {id} as {email}")
        raise HTTPException(status_code=400, detail="You don't have permission to delete this assignment")
    try:
        result = await db.assignments.delete_one(id)
    except InvalidId:
        raise HTTPException(status_code=400, detail=f"Invalid assignment id: {id}")
    except Exception as e:
        logger.error(f"Failed to delete assignment {id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
    logger.info(f"Assignment {id} deleted by {email}")
    return result
