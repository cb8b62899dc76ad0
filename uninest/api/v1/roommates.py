from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Request, Response, status

from uninest.api.deps import DBSession, Publisher, StudentUser
from uninest.api.rate_limit import limiter
from uninest.api.responses import create_success_response
from uninest.core.config import get_settings
from uninest.models.roommate import (
    RoommateMatchStatusEnum,
    RoommateProfile,
    SleepScheduleEnum,
    StudyHabitsEnum,
)
from uninest.repositories.roommate import ProfileSearchFilters
from uninest.schemas.common import PaginationMeta
from uninest.schemas.roommate import (
    MatchCreateRequest,
    MatchListItem,
    MatchRespondRequest,
    MatchResponse,
    ProfileResponse,
    ProfileUpsertRequest,
    PublicProfileSummary,
    SearchResultItem,
    UserSummary,
)
from uninest.services.match import build_match_service
from uninest.services.roommate import RoommateProfileService

settings = get_settings()

router = APIRouter(prefix="/roommates", tags=["Roommates"])

def _profile_data(profile: RoommateProfile | None) -> dict | None:
    if profile is None:
        return None
    return ProfileResponse.model_validate(profile).model_dump()

@router.get("/profile")
async def get_my_profile(
    current_user: StudentUser,
    db: DBSession,
) -> dict:
    """Get the current user's roommate profile, or null when none exists."""
    profile = await RoommateProfileService(db).get_profile(current_user.id)
    return create_success_response(data={"profile": _profile_data(profile)})

@router.post("/profile")
async def upsert_my_profile(
    profile_data: ProfileUpsertRequest,
    current_user: StudentUser,
    db: DBSession,
) -> dict:
    """
    Create or replace the current user's roommate profile.

    Every field is overwritten; omitted optional fields are cleared.
    """
    profile, created = await RoommateProfileService(db).save_profile(
        current_user,
        profile_data.model_dump(),
    )
    return create_success_response(data={
        "profile": _profile_data(profile),
        "created": created,
    })

@router.delete("/profile")
async def deactivate_my_profile(
    current_user: StudentUser,
    db: DBSession,
) -> dict:
    """Withdraw the profile from search; the record is kept."""
    profile = await RoommateProfileService(db).deactivate_profile(current_user.id)
    return create_success_response(data={
        "message": "Roommate profile deactivated",
        "profile": _profile_data(profile),
    })

@router.get("/search")
async def search_roommates(
    current_user: StudentUser,
    db: DBSession,
    university_id: UUID | None = None,
    min_budget: Annotated[Decimal | None, Query(ge=0)] = None,
    max_budget: Annotated[Decimal | None, Query(ge=0)] = None,
    min_cleanliness: Annotated[int | None, Query(ge=1, le=5)] = None,
    max_cleanliness: Annotated[int | None, Query(ge=1, le=5)] = None,
    sleep_schedule: SleepScheduleEnum | None = None,
    study_habits: StudyHabitsEnum | None = None,
    smoking_allowed: bool | None = None,
    pets_allowed: bool | None = None,
    major: Annotated[str | None, Query(max_length=100)] = None,
    limit: Annotated[int, Query(ge=1)] = settings.search_default_limit,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> dict:
    """
    Search active roommate profiles.

    Results are ranked by compatibility when the caller has a profile and
    listed newest first otherwise. ``limit`` is capped at the server maximum.
    """
    filters = ProfileSearchFilters(
        university_id=university_id,
        min_budget=min_budget,
        max_budget=max_budget,
        min_cleanliness=min_cleanliness,
        max_cleanliness=max_cleanliness,
        sleep_schedule=sleep_schedule,
        study_habits=study_habits,
        smoking_allowed=smoking_allowed,
        pets_allowed=pets_allowed,
        major=major,
    )

    result = await RoommateProfileService(db).search(
        current_user,
        filters,
        limit=limit,
        offset=offset,
    )

    items = [
        SearchResultItem(
            profile=PublicProfileSummary.model_validate(profile),
            user=UserSummary.model_validate(profile.user),
            compatibility_score=candidate.score,
            same_major=candidate.same_major,
        ).model_dump()
        for profile, candidate in result.profiles
    ]

    data = {
        "profiles": items,
        "total": result.total,
        "has_profile": result.has_profile,
        "is_profile_active": result.is_profile_active,
    }
    if result.message:
        data["message"] = result.message

    pagination_meta = PaginationMeta.build(
        limit=result.limit,
        offset=result.offset,
        total_items=result.total,
    )

    return create_success_response(
        data=data,
        pagination=pagination_meta.model_dump(),
    )

@router.get("/matches")
async def list_my_matches(
    current_user: StudentUser,
    db: DBSession,
    status_filter: Annotated[RoommateMatchStatusEnum | None, Query(alias="status")] = None,
) -> dict:
    """List sent and received match requests, newest first."""
    overviews = await build_match_service(db).list_matches(
        current_user.id,
        status=status_filter,
    )

    matches = []
    for overview in overviews:
        item = MatchListItem(
            **MatchResponse.model_validate(overview.match).model_dump(),
            is_sender=overview.is_sender,
            other_user=(
                UserSummary.model_validate(overview.other_user)
                if overview.other_user is not None else None
            ),
            other_profile=(
                PublicProfileSummary.model_validate(overview.other_profile)
                if overview.other_profile is not None else None
            ),
        )
        matches.append(item.model_dump())

    return create_success_response(data={"matches": matches})

@router.post("/matches/{user_id}", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.match_request_rate_limit)
async def send_match_request(
    request: Request,
    user_id: UUID,
    current_user: StudentUser,
    db: DBSession,
    publisher: Publisher,
    payload: MatchCreateRequest | None = None,
) -> dict:
    """Send a roommate match request to another student."""
    match = await build_match_service(db, publisher).create_match_request(
        current_user,
        user_id,
        payload.message if payload else None,
    )
    return create_success_response(data={
        "match": MatchResponse.model_validate(match).model_dump(),
    })

@router.put("/matches/{match_id}")
async def respond_to_match(
    match_id: UUID,
    response_data: MatchRespondRequest,
    current_user: StudentUser,
    db: DBSession,
    publisher: Publisher,
) -> dict:
    """Accept or reject a pending request addressed to the current user."""
    match = await build_match_service(db, publisher).respond_to_match(
        current_user,
        match_id,
        response_data.status,
    )
    return create_success_response(data={
        "match": MatchResponse.model_validate(match).model_dump(),
    })

@router.delete("/matches/{match_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_match(
    match_id: UUID,
    current_user: StudentUser,
    db: DBSession,
) -> Response:
    """Remove a match record; either party may do so in any state."""
    await build_match_service(db).delete_match(current_user.id, match_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
