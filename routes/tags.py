import sqlite3

from fastapi import APIRouter, Depends, Path, Response, status
from typing import List

from db.database import get_db, transaction
from models.ids import MAX_ROW_ID
from models.tag import Tag, TagCreate
from utils.auth import get_current_owner_id
from utils.errors import AlreadyExistsError, ForbiddenError, TagNotFoundError
from utils.tags import delete_tag, find_tag_by_name, get_tag, insert_tag, list_tags, update_tag

router = APIRouter()

def load_owned_tag(conn, owner_id: int, tag_id: int) -> dict:
    tag = get_tag(conn, tag_id)
    if not tag:
        raise TagNotFoundError(tag_id)
    if tag["owner_id"] != owner_id:
        raise ForbiddenError("Unauthorized access to tag")
    return tag

@router.get("", response_model=List[Tag])
async def get_all_tags(owner_id: int = Depends(get_current_owner_id), conn = Depends(get_db)):
    return [Tag(**tag) for tag in list_tags(conn, owner_id)]

@router.post("", response_model=Tag)
async def create_tag(request: TagCreate, owner_id: int = Depends(get_current_owner_id), conn = Depends(get_db)):
    if find_tag_by_name(conn, owner_id, request.name):
        raise AlreadyExistsError(f"Tag already exists: {request.name}")
    try:
        with transaction(conn):
            tag_id = insert_tag(conn, owner_id, request.name, request.color)
    except sqlite3.IntegrityError:
        raise AlreadyExistsError(f"Tag already exists: {request.name}")
    return Tag(id=tag_id, name=request.name, color=request.color)

@router.put("/{tag_id}", response_model=Tag)
async def edit_tag(
    request: TagCreate,
    tag_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    owner_id: int = Depends(get_current_owner_id),
    conn = Depends(get_db),
):
    load_owned_tag(conn, owner_id, tag_id)
    existing = find_tag_by_name(conn, owner_id, request.name)
    if existing and existing["id"] != tag_id:
        raise AlreadyExistsError(f"Tag already exists: {request.name}")
    with transaction(conn):
        update_tag(conn, tag_id, request.name, request.color)
    return Tag(id=tag_id, name=request.name, color=request.color)

@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tag(
    tag_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    owner_id: int = Depends(get_current_owner_id),
    conn = Depends(get_db),
):
    load_owned_tag(conn, owner_id, tag_id)
    with transaction(conn):
        delete_tag(conn, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
