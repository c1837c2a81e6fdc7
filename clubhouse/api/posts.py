"""Posts and comments API router."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clubhouse.db.session import get_db
from clubhouse.schemas.schemas import (
    PostCreate, PostUpdate, PostOut, PostDetail, PostListResponse, NoticeOut,
    CommentCreate, CommentOut, MessageResponse,
)
from clubhouse.services.post_service import post_service
from clubhouse.core.security import Principal, get_current_principal

router = APIRouter(tags=["posts"])


def _comment_out(comment) -> CommentOut:
    return CommentOut(
        id=comment.id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        author_name=comment.author.name if comment.author else None,
        content=comment.content,
        created_at=comment.created_at,
    )


@router.get("/clubs/{club_id}/posts", response_model=PostListResponse)
async def list_posts(
    club_id: int,
    page: int = Query(1),
    page_size: Optional[int] = Query(None, alias="pageSize"),
    sort: str = Query("latest"),
    q: Optional[str] = Query(None),
    only_notice: bool = Query(False, alias="onlyNotice"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """One page of the club board, notices first."""
    return post_service.list_by_club(
        db, club_id, principal.user_id,
        page=page, page_size=page_size, sort=sort, query=q, only_notice=only_notice,
    )


@router.post("/clubs/{club_id}/posts", response_model=PostOut, status_code=201)
async def create_post(
    club_id: int,
    body: PostCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return post_service.create_post(
        db, club_id, principal.user_id, body.title, body.content, body.visibility, body.is_notice,
    )


@router.put("/clubs/{club_id}/posts/{post_id}", response_model=PostDetail)
async def update_post(
    club_id: int,
    post_id: int,
    body: PostUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Edit a post; only the supplied fields change."""
    return post_service.update_post(
        db, post_id, principal.user_id, club_id, body.model_dump(exclude_unset=True),
    )


@router.delete("/clubs/{club_id}/posts/{post_id}", response_model=MessageResponse)
async def delete_post(
    club_id: int,
    post_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return post_service.delete_post(db, post_id, club_id, principal.user_id)


@router.get("/posts/notices/my", response_model=List[NoticeOut])
async def list_my_notices(
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Notices from every club the user belongs to, newest first."""
    return post_service.list_notices_for_user(db, principal.user_id, limit)


@router.get("/posts/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Read a post (counts one view)."""
    return post_service.get_post(db, post_id, principal.user_id)


@router.get("/posts/{post_id}/comments", response_model=List[CommentOut])
async def list_comments(
    post_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return [_comment_out(c) for c in post_service.list_comments(db, post_id, principal.user_id)]


@router.post("/posts/{post_id}/comments", response_model=CommentOut, status_code=201)
async def create_comment(
    post_id: int,
    body: CommentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return _comment_out(post_service.create_comment(db, post_id, principal.user_id, body.content))
