import pytest

from clubhouse.core.config import settings
from clubhouse.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from clubhouse.models.club import ClubMember, ClubRoleEnum, MemberTierEnum
from clubhouse.models.post import Comment, Post, PostVisibilityEnum
from clubhouse.services.club_service import club_service
from clubhouse.services.post_service import post_service


def _post(db, club, user, title="Hello", content="Body", **kwargs):
    return post_service.create_post(db, club.id, user.id, title, content, **kwargs)


def _ids(page):
    return [item["id"] for item in page["items"]]


def test_notice_requires_senior_tier_or_leader(db, club, leader, make_member):
    junior_writer = make_member(club, role=ClubRoleEnum.WRITER)
    with pytest.raises(AuthorizationError):
        _post(db, club, junior_writer, is_notice=True)
    assert db.query(Post).count() == 0

    senior_reader = make_member(club, tier=MemberTierEnum.SENIOR)
    assert _post(db, club, senior_reader, is_notice=True).is_notice is True

    junior_leader = make_member(club, role=ClubRoleEnum.LEADER)
    assert _post(db, club, junior_leader, is_notice=True).is_notice is True


def test_create_requires_approved_member(db, club, make_user):
    applicant = make_user()
    club_service.request_join(db, club.id, applicant.id)
    with pytest.raises(AuthorizationError):
        _post(db, club, applicant)


def test_create_validates_fields(db, club, leader):
    with pytest.raises(ValidationError):
        _post(db, club, leader, title="  ")
    with pytest.raises(ValidationError):
        _post(db, club, leader, content="")
    with pytest.raises(ValidationError):
        _post(db, club, leader, visibility="EVERYONE")


def test_author_tier_is_snapshotted(db, club, leader, make_member):
    author = make_member(club)
    post = _post(db, club, author)
    assert post.author_tier == MemberTierEnum.JUNIOR

    member_id = db.query(ClubMember.id).filter(
        ClubMember.user_id == author.id, ClubMember.club_id == club.id,
    ).scalar()
    club_service.update_member_role_tier(db, leader.id, club.id, member_id, {"tier": "SENIOR"})

    item = post_service.list_by_club(db, club.id, author.id)["items"][0]
    assert item["author_tier"] == MemberTierEnum.JUNIOR
    detail = post_service.get_post(db, post.id, author.id)
    assert detail["author"]["tier"] == MemberTierEnum.JUNIOR


def test_pages_cover_every_post_exactly_once(db, club, leader):
    for n in range(23):
        _post(db, club, leader, title=f"Post {n}", is_notice=(n % 5 == 0))

    first = post_service.list_by_club(db, club.id, leader.id, page=1, page_size=10)
    assert first["pagination"] == {"total_count": 23, "total_pages": 3, "page": 1, "page_size": 10}

    seen = []
    for page in range(1, 4):
        seen += _ids(post_service.list_by_club(db, club.id, leader.id, page=page, page_size=10))
    assert len(seen) == 23
    assert len(set(seen)) == 23
    assert post_service.list_by_club(db, club.id, leader.id, page=4, page_size=10)["items"] == []


def test_notices_are_pinned_first(db, club, leader):
    older_notice = _post(db, club, leader, title="Rules", is_notice=True)
    newer = _post(db, club, leader, title="Chat")

    assert _ids(post_service.list_by_club(db, club.id, leader.id)) == [older_notice.id, newer.id]


def test_sort_modes(db, club, leader):
    first = _post(db, club, leader, title="First")
    second = _post(db, club, leader, title="Second")
    third = _post(db, club, leader, title="Third")
    for _ in range(3):
        post_service.get_post(db, second.id, leader.id)
    post_service.get_post(db, first.id, leader.id)

    assert _ids(post_service.list_by_club(db, club.id, leader.id, sort="latest")) == [third.id, second.id, first.id]
    assert _ids(post_service.list_by_club(db, club.id, leader.id, sort="oldest")) == [first.id, second.id, third.id]
    assert _ids(post_service.list_by_club(db, club.id, leader.id, sort="mostViewed")) == [second.id, first.id, third.id]
    with pytest.raises(ValidationError):
        post_service.list_by_club(db, club.id, leader.id, sort="random")


def test_query_matches_title_or_content_literally(db, club, leader):
    percent = _post(db, club, leader, title="100% attendance")
    _post(db, club, leader, title="100 members")
    in_body = _post(db, club, leader, title="Minutes", content="We reached 50% turnout")

    found = post_service.list_by_club(db, club.id, leader.id, query=" % ")
    assert sorted(_ids(found)) == sorted([percent.id, in_body.id])
    assert found["pagination"]["total_count"] == 2


def test_only_notice_filters_to_notices(db, club, leader):
    notice = _post(db, club, leader, title="Rules", is_notice=True)
    _post(db, club, leader, title="Chat")

    page = post_service.list_by_club(db, club.id, leader.id, only_notice=True)
    assert _ids(page) == [notice.id]
    assert page["pagination"]["total_count"] == 1


def test_page_and_page_size_are_clamped(db, club, leader):
    _post(db, club, leader)
    assert post_service.list_by_club(db, club.id, leader.id)["pagination"]["page_size"] == settings.POST_PAGE_SIZE_DEFAULT

    huge = post_service.list_by_club(db, club.id, leader.id, page=0, page_size=10_000)
    assert huge["pagination"]["page"] == 1
    assert huge["pagination"]["page_size"] == settings.POST_PAGE_SIZE_MAX

    tiny = post_service.list_by_club(db, club.id, leader.id, page_size=0)
    assert tiny["pagination"]["page_size"] == 1


def test_empty_board_has_zero_pages(db, club, leader):
    page = post_service.list_by_club(db, club.id, leader.id)
    assert page["items"] == []
    assert page["pagination"]["total_pages"] == 0


def test_list_counts_comments(db, club, leader, make_member):
    reader = make_member(club)
    post = _post(db, club, leader)
    post_service.create_comment(db, post.id, reader.id, "Nice")
    post_service.create_comment(db, post.id, leader.id, "Thanks")

    assert post_service.list_by_club(db, club.id, reader.id)["items"][0]["comment_count"] == 2


def test_each_read_counts_one_view(db, club, leader, make_member):
    reader = make_member(club)
    post = _post(db, club, leader)

    views = [post_service.get_post(db, post.id, reader.id)["view_count"] for _ in range(5)]
    assert views == [1, 2, 3, 4, 5]
    db.refresh(post)
    assert post.view_count == 5


def test_get_post_requires_membership(db, club, leader, make_user):
    post = _post(db, club, leader)
    with pytest.raises(AuthorizationError):
        post_service.get_post(db, post.id, make_user().id)
    with pytest.raises(ResourceNotFoundError):
        post_service.get_post(db, 404, leader.id)
    db.refresh(post)
    assert post.view_count == 0


def test_update_applies_partial_patch(db, club, leader):
    post = _post(db, club, leader, title="Draft", content="Original")
    detail = post_service.update_post(db, post.id, leader.id, club.id, {"title": "Final"})
    assert detail["title"] == "Final"
    assert detail["content"] == "Original"
    assert detail["view_count"] == 0

    detail = post_service.update_post(
        db, post.id, leader.id, club.id, {"visibility": PostVisibilityEnum.SENIOR.value},
    )
    assert detail["visibility"] == PostVisibilityEnum.SENIOR


def test_update_rejects_null_and_unknown_fields(db, club, leader):
    post = _post(db, club, leader)
    with pytest.raises(ValidationError):
        post_service.update_post(db, post.id, leader.id, club.id, {"content": None})
    with pytest.raises(ValidationError):
        post_service.update_post(db, post.id, leader.id, club.id, {"view_count": 99})


def test_notice_flip_is_gated_on_editor(db, club, leader, make_member):
    writer = make_member(club, role=ClubRoleEnum.WRITER)
    post = _post(db, club, writer, title="Plan")

    with pytest.raises(AuthorizationError):
        post_service.update_post(db, post.id, writer.id, club.id, {"is_notice": True})
    unchanged = post_service.update_post(db, post.id, writer.id, club.id, {"is_notice": False, "title": "Plan B"})
    assert unchanged["title"] == "Plan B"

    assert post_service.update_post(db, post.id, leader.id, club.id, {"is_notice": True})["is_notice"] is True


def test_update_by_non_author_depends_on_ownership_flag(db, club, leader, make_member, monkeypatch):
    author = make_member(club)
    other = make_member(club)
    post = _post(db, club, author)

    monkeypatch.setattr(settings, "FEATURE_UNIFIED_POST_OWNERSHIP", False)
    assert post_service.update_post(db, post.id, other.id, club.id, {"title": "Edited"})["title"] == "Edited"

    monkeypatch.setattr(settings, "FEATURE_UNIFIED_POST_OWNERSHIP", True)
    with pytest.raises(AuthorizationError):
        post_service.update_post(db, post.id, other.id, club.id, {"title": "Again"})
    assert post_service.update_post(db, post.id, leader.id, club.id, {"title": "By leader"})["title"] == "By leader"


def test_update_post_of_other_club_is_not_found(db, club, leader):
    other_club = club_service.create_club(db, "Go Club", leader.id)
    post = _post(db, other_club, leader)
    with pytest.raises(ResourceNotFoundError):
        post_service.update_post(db, post.id, leader.id, club.id, {"title": "Moved"})


def test_delete_is_author_only_by_default(db, club, leader, make_member, monkeypatch):
    author = make_member(club)
    post = _post(db, club, author)
    post_id = post.id
    post_service.create_comment(db, post_id, leader.id, "First")

    monkeypatch.setattr(settings, "FEATURE_UNIFIED_POST_OWNERSHIP", False)
    with pytest.raises(AuthorizationError):
        post_service.delete_post(db, post_id, club.id, leader.id)

    assert post_service.delete_post(db, post_id, club.id, author.id) == {"message": "Post deleted"}
    assert db.query(Post).count() == 0
    assert db.query(Comment).count() == 0
    with pytest.raises(ResourceNotFoundError):
        post_service.delete_post(db, post_id, club.id, author.id)


def test_leader_may_delete_under_unified_ownership(db, club, leader, make_member, monkeypatch):
    post_id = _post(db, club, make_member(club)).id

    monkeypatch.setattr(settings, "FEATURE_UNIFIED_POST_OWNERSHIP", True)
    post_service.delete_post(db, post_id, club.id, leader.id)
    assert db.query(Post).count() == 0


def test_comments_oldest_first(db, club, leader, make_member, make_user):
    reader = make_member(club)
    post = _post(db, club, leader)
    post_service.create_comment(db, post.id, reader.id, "One")
    post_service.create_comment(db, post.id, leader.id, "Two")

    assert [c.content for c in post_service.list_comments(db, post.id, reader.id)] == ["One", "Two"]
    with pytest.raises(ValidationError):
        post_service.create_comment(db, post.id, reader.id, "   ")
    with pytest.raises(AuthorizationError):
        post_service.create_comment(db, post.id, make_user().id, "Drive-by")
    with pytest.raises(ResourceNotFoundError):
        post_service.list_comments(db, 404, reader.id)


def test_notices_for_user_span_approved_clubs(db, club, leader, make_user):
    go_club = club_service.create_club(db, "Go Club", leader.id)
    chess_notice = _post(db, club, leader, title="Chess rules", is_notice=True)
    _post(db, club, leader, title="Chat")
    go_notice = _post(db, go_club, leader, title="Go rules", is_notice=True)

    owner = make_user()
    poker = club_service.create_club(db, "Poker Club", owner.id)
    _post(db, poker, owner, title="Poker rules", is_notice=True)
    club_service.request_join(db, poker.id, leader.id)

    notices = post_service.list_notices_for_user(db, leader.id)
    assert [(n["id"], n["club_name"]) for n in notices] == [
        (go_notice.id, "Go Club"),
        (chess_notice.id, "Chess Club"),
    ]
    assert len(post_service.list_notices_for_user(db, leader.id, limit=1)) == 1
    with pytest.raises(ValidationError):
        post_service.list_notices_for_user(db, leader.id, limit=0)
