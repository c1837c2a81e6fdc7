"""Pydantic schemas for API request/response serialization."""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from clubhouse.models.user import SystemRoleEnum
from clubhouse.models.club import ClubRoleEnum, MemberTierEnum
from clubhouse.models.post import PostVisibilityEnum


# ---- Auth ----
class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=4, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=8)

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=4)
    password: str = Field(..., min_length=1)


# ---- User ----
class UserOut(BaseModel):
    id: int
    email: str
    name: str
    system_role: SystemRoleEnum
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


# ---- Club ----
class ClubCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)

class ClubOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class MyClubOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    role: ClubRoleEnum
    tier: MemberTierEnum


# ---- Membership ----
class MembershipOut(BaseModel):
    id: int
    user_id: int
    club_id: int
    approved: bool
    role: ClubRoleEnum
    tier: MemberTierEnum
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class JoinRequestOut(MembershipOut):
    name: Optional[str] = None
    email: Optional[str] = None

class JoinResponse(BaseModel):
    message: str
    request: MembershipOut

class MemberOut(BaseModel):
    id: int
    user_id: int
    name: Optional[str] = None
    email: Optional[str] = None
    role: ClubRoleEnum
    tier: MemberTierEnum
    joined_at: datetime

class MemberRoleTierUpdate(BaseModel):
    role: Optional[ClubRoleEnum] = None
    tier: Optional[MemberTierEnum] = None


# ---- Schedule ----
class ScheduleCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    start_at: datetime
    end_at: datetime
    content: Optional[str] = Field(default=None, max_length=500)

class ScheduleUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    content: Optional[str] = Field(default=None, max_length=500)

class ScheduleOut(BaseModel):
    id: int
    club_id: int
    title: str
    start_at: datetime
    end_at: datetime
    content: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserScheduleOut(ScheduleOut):
    club_name: str


# ---- Post ----
class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    visibility: PostVisibilityEnum = PostVisibilityEnum.ALL
    is_notice: bool = False

class PostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1)
    visibility: Optional[PostVisibilityEnum] = None
    is_notice: Optional[bool] = None

class PostOut(BaseModel):
    id: int
    club_id: int
    user_id: int
    title: str
    content: str
    visibility: PostVisibilityEnum
    author_tier: Optional[MemberTierEnum] = None
    is_notice: bool
    view_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PostListItem(BaseModel):
    id: int
    title: str
    created_at: datetime
    updated_at: datetime
    view_count: int
    author_name: Optional[str] = None
    author_tier: Optional[MemberTierEnum] = None
    visibility: PostVisibilityEnum
    comment_count: int
    is_notice: bool

class Pagination(BaseModel):
    total_count: int
    total_pages: int
    page: int
    page_size: int

class PostListResponse(BaseModel):
    items: List[PostListItem]
    pagination: Pagination

class PostAuthor(BaseModel):
    id: int
    name: Optional[str] = None
    tier: Optional[MemberTierEnum] = None
    role: Optional[ClubRoleEnum] = None

class PostDetail(BaseModel):
    id: int
    club_id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    view_count: int
    visibility: PostVisibilityEnum
    is_notice: bool
    author: PostAuthor

class NoticeOut(BaseModel):
    id: int
    club_id: int
    club_name: str
    title: str
    created_at: datetime
    view_count: int
    comment_count: int


# ---- Comment ----
class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)

class CommentOut(BaseModel):
    id: int
    post_id: int
    user_id: int
    author_name: Optional[str] = None
    content: str
    created_at: Optional[datetime] = None


# ---- Generic ----
class MessageResponse(BaseModel):
    message: str

class SuccessResponse(BaseModel):
    success: bool
