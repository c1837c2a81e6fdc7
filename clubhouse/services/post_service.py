"""Post service — club board posts, notices, and comments."""

import logging
import math
from typing import Optional, Dict, Any, List

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from clubhouse.core.config import settings
from clubhouse.db.session import atomic
from clubhouse.models.club import Club, ClubMember
from clubhouse.models.post import Post, Comment, PostVisibilityEnum
from clubhouse.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from clubhouse.services import permissions

logger = logging.getLogger("clubhouse")

POST_SORTS = ("latest", "oldest", "mostViewed")
POST_FIELDS = ("title", "content", "visibility", "is_notice")


def _comment_counts(db: Session):
    return (
        db.query(Comment.post_id, func.count(Comment.id).label("comment_count"))
        .group_by(Comment.post_id)
        .subquery()
    )


def _order_by(sort: str, only_notice: bool) -> list:
    order = [] if only_notice else [Post.is_notice.desc()]
    if sort == "oldest":
        order += [Post.created_at.asc(), Post.id.asc()]
    elif sort == "mostViewed":
        order += [Post.view_count.desc(), Post.created_at.desc(), Post.id.desc()]
    else:
        order += [Post.created_at.desc(), Post.id.desc()]
    return order


def _required_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value


def _visibility(value: Any) -> PostVisibilityEnum:
    try:
        return PostVisibilityEnum(value)
    except ValueError:
        raise ValidationError(f"Invalid visibility: {value}")


class PostService:
    """Manages club posts and their comments."""

    @staticmethod
    def list_by_club(
        db: Session,
        club_id: int,
        user_id: int,
        page: int = 1,
        page_size: Optional[int] = None,
        sort: str = "latest",
        query: Optional[str] = None,
        only_notice: bool = False,
    ) -> Dict[str, Any]:
        """One page of a club's board.

        Notices come first unless ``only_notice`` already restricts the page to
        notices. The count and the page are computed from the same filter within one
        session, so walking pages 1..total_pages yields every match exactly once.
        """
        permissions.require_approved_member(db, user_id, club_id)
        if sort not in POST_SORTS:
            raise ValidationError(f"Invalid sort: {sort}")

        page = max(page or 1, 1)
        if page_size is None:
            page_size = settings.POST_PAGE_SIZE_DEFAULT
        page_size = min(max(page_size, 1), settings.POST_PAGE_SIZE_MAX)

        filtered = db.query(Post).filter(Post.club_id == club_id)
        q = query.strip() if query else ""
        if q:
            filtered = filtered.filter(
                or_(
                    Post.title.contains(q, autoescape=True),
                    Post.content.contains(q, autoescape=True),
                )
            )
        if only_notice:
            filtered = filtered.filter(Post.is_notice == True)

        total_count = filtered.count()

        counts = _comment_counts(db)
        rows = (
            filtered.outerjoin(counts, counts.c.post_id == Post.id)
            .add_columns(func.coalesce(counts.c.comment_count, 0))
            .order_by(*_order_by(sort, only_notice))
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )

        items = [
            {
                "id": p.id,
                "title": p.title,
                "created_at": p.created_at,
                "updated_at": p.updated_at,
                "view_count": p.view_count,
                "author_name": p.author.name if p.author else None,
                "author_tier": p.author_tier,
                "visibility": p.visibility,
                "comment_count": comment_count,
                "is_notice": p.is_notice,
            }
            for p, comment_count in rows
        ]

        return {
            "items": items,
            "pagination": {
                "total_count": total_count,
                "total_pages": math.ceil(total_count / page_size),
                "page": page,
                "page_size": page_size,
            },
        }

    @staticmethod
    def list_notices_for_user(db: Session, user_id: int, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Notice board: notices of every club the user is an approved member of, newest first."""
        if limit is not None and limit <= 0:
            raise ValidationError("limit must be a positive integer")

        counts = _comment_counts(db)
        query = (
            db.query(Post, Club.name, func.coalesce(counts.c.comment_count, 0))
            .join(Club, Post.club_id == Club.id)
            .join(ClubMember, ClubMember.club_id == Club.id)
            .outerjoin(counts, counts.c.post_id == Post.id)
            .filter(
                ClubMember.user_id == user_id,
                ClubMember.approved == True,
                Post.is_notice == True,
            )
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)

        return [
            {
                "id": p.id,
                "club_id": p.club_id,
                "club_name": club_name,
                "title": p.title,
                "created_at": p.created_at,
                "view_count": p.view_count,
                "comment_count": comment_count,
            }
            for p, club_name, comment_count in query.all()
        ]

    @staticmethod
    def _get(db: Session, post_id: int) -> Post:
        post = db.query(Post).filter(Post.id == post_id).first()
        if not post:
            raise ResourceNotFoundError(f"Post {post_id} not found")
        return post

    @staticmethod
    def _detail(db: Session, post: Post) -> Dict[str, Any]:
        author_membership = permissions.find_membership(db, post.user_id, post.club_id)
        return {
            "id": post.id,
            "club_id": post.club_id,
            "title": post.title,
            "content": post.content,
            "created_at": post.created_at,
            "updated_at": post.updated_at,
            "view_count": post.view_count,
            "visibility": post.visibility,
            "is_notice": post.is_notice,
            "author": {
                "id": post.user_id,
                "name": post.author.name if post.author else None,
                "tier": post.author_tier,
                "role": author_membership.role if author_membership else None,
            },
        }

    @staticmethod
    def get_post(db: Session, post_id: int, user_id: int) -> Dict[str, Any]:
        """Read a post. Every successful call counts one view."""
        post = PostService._get(db, post_id)
        permissions.require_approved_member(db, user_id, post.club_id)

        with atomic(db):
            db.query(Post).filter(Post.id == post_id).update(
                {Post.view_count: Post.view_count + 1}, synchronize_session=False,
            )
        db.refresh(post)
        return PostService._detail(db, post)

    @staticmethod
    def create_post(
        db: Session,
        club_id: int,
        user_id: int,
        title: str,
        content: str,
        visibility: PostVisibilityEnum = PostVisibilityEnum.ALL,
        is_notice: bool = False,
    ) -> Post:
        """Write a post, snapshotting the author's current tier.

        Raises:
            AuthorizationError: If not an approved member, or a notice is requested
                by a member who may not set notices.
        """
        membership = permissions.require_approved_member(db, user_id, club_id)
        if is_notice and not permissions.can_set_notice(membership.role, membership.tier):
            raise AuthorizationError("Not allowed to post notices")

        with atomic(db):
            post = Post(
                club_id=club_id,
                user_id=user_id,
                title=_required_text(title, "title"),
                content=_required_text(content, "content"),
                visibility=_visibility(visibility),
                author_tier=membership.tier,
                is_notice=bool(is_notice),
            )
            db.add(post)
        db.refresh(post)
        logger.info("Post %s created in club %s by user %s", post.id, club_id, user_id)
        return post

    @staticmethod
    def update_post(
        db: Session,
        post_id: int,
        user_id: int,
        club_id: int,
        changes: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Apply a partial patch to a post and return its detail (no view is counted).

        Flipping ``is_notice`` needs the editor's own notice permission. Unless
        FEATURE_UNIFIED_POST_OWNERSHIP is set, editing is not limited to the author.
        """
        membership = permissions.require_approved_member(db, user_id, club_id)
        post = PostService._get(db, post_id)
        if post.club_id != club_id:
            raise ResourceNotFoundError(f"Post {post_id} not found")

        if settings.FEATURE_UNIFIED_POST_OWNERSHIP and not permissions.can_modify_post(post, membership):
            raise AuthorizationError("Only the author or a club leader can edit this post")

        unknown = set(changes) - set(POST_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
        for field, value in changes.items():
            if value is None:
                raise ValidationError(f"{field} cannot be null")

        updates = dict(changes)
        for field in ("title", "content"):
            if field in updates:
                _required_text(updates[field], field)
        if "visibility" in updates:
            updates["visibility"] = _visibility(updates["visibility"])
        if "is_notice" in updates:
            updates["is_notice"] = bool(updates["is_notice"])
            if updates["is_notice"] != post.is_notice and not permissions.can_set_notice(
                membership.role, membership.tier
            ):
                raise AuthorizationError("Not allowed to change notice status")

        with atomic(db):
            for field, value in updates.items():
                setattr(post, field, value)
        db.refresh(post)
        logger.info("Post %s updated by user %s: %s", post_id, user_id, sorted(updates))
        return PostService._detail(db, post)

    @staticmethod
    def delete_post(db: Session, post_id: int, club_id: int, user_id: int) -> Dict[str, str]:
        """Delete a post. Author only (author or LEADER under the unified policy)."""
        membership = permissions.require_approved_member(db, user_id, club_id)
        post = PostService._get(db, post_id)
        if post.club_id != club_id:
            raise ResourceNotFoundError(f"Post {post_id} not found")
        if not permissions.can_modify_post(post, membership):
            raise AuthorizationError("Only the author can delete this post")

        with atomic(db):
            db.delete(post)
        logger.info("Post %s deleted from club %s by user %s", post_id, club_id, user_id)
        return {"message": "Post deleted"}

    @staticmethod
    def list_comments(db: Session, post_id: int, user_id: int) -> List[Comment]:
        """Comments on a post, oldest first."""
        post = PostService._get(db, post_id)
        permissions.require_approved_member(db, user_id, post.club_id)
        return (
            db.query(Comment)
            .filter(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )

    @staticmethod
    def create_comment(db: Session, post_id: int, user_id: int, content: str) -> Comment:
        """Comment on a post. Any approved member of the post's club may comment."""
        post = PostService._get(db, post_id)
        permissions.require_approved_member(db, user_id, post.club_id)

        with atomic(db):
            comment = Comment(post_id=post_id, user_id=user_id, content=_required_text(content, "content"))
            db.add(comment)
        db.refresh(comment)
        return comment


post_service = PostService()
