"""
Tests for the HTTP surface.

Envelope properties are checked with Hypothesis; endpoint flows run
through httpx against the ASGI app with a test database.
"""

import uuid
from typing import Any

import pytest
from httpx import AsyncClient
from hypothesis import given, settings, strategies as st

from uninest.api.responses import create_error_response, create_success_response
from uninest.models import GenderEnum, UserRoleEnum
from uninest.schemas.common import PaginationMeta


# Strategies for generating test data
json_primitives = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(),
    st.floats(allow_nan=False, allow_infinity=False),
    st.text(max_size=100),
)

json_data = st.recursive(
    json_primitives,
    lambda children: st.one_of(
        st.lists(children, max_size=5),
        st.dictionaries(st.text(min_size=1, max_size=20), children, max_size=5),
    ),
    max_leaves=10,
)

error_codes = st.sampled_from([
    "VALIDATION_ERROR",
    "NOT_FOUND",
    "SELF_MATCH",
    "PROFILE_REQUIRED",
    "TARGET_NOT_ELIGIBLE",
    "TARGET_PROFILE_REQUIRED",
    "GENDER_MISMATCH",
    "MATCH_EXISTS",
    "NOT_RECIPIENT",
    "ALREADY_RESPONDED",
    "NOT_PARTICIPANT",
])


class TestAPIResponseFormatConsistency:
    """
    Property: *for any* response, success or error, the envelope carries
    ``success``, ``data`` and ``error``.
    """

    @given(data=json_data)
    @settings(max_examples=100)
    def test_success_response_has_required_fields(self, data: Any) -> None:
        response = create_success_response(data=data)

        assert response["success"] is True
        assert response["error"] is None
        assert response["data"] == data
        assert "pagination" not in response

    @given(
        limit=st.integers(min_value=1, max_value=50),
        offset=st.integers(min_value=0, max_value=1000),
        total=st.integers(min_value=0, max_value=2000),
    )
    @settings(max_examples=100)
    def test_pagination_meta_has_next(self, limit: int, offset: int, total: int) -> None:
        meta = PaginationMeta.build(limit=limit, offset=offset, total_items=total)
        response = create_success_response(data=[], pagination=meta.model_dump())

        assert response["pagination"]["has_next"] is (offset + limit < total)
        assert response["pagination"] == {
            "limit": limit,
            "offset": offset,
            "total_items": total,
            "has_next": meta.has_next,
        }

    @given(code=error_codes, message=st.text(min_size=1, max_size=200))
    @settings(max_examples=100)
    def test_error_response_has_required_fields(self, code: str, message: str) -> None:
        response = create_error_response(code=code, message=message)

        assert response["success"] is False
        assert response["data"] is None
        assert response["error"] == {"code": code, "message": message}

    @given(
        code=error_codes,
        field=st.text(min_size=1, max_size=30),
        message=st.text(min_size=1, max_size=100),
    )
    @settings(max_examples=50)
    def test_error_details_are_kept(self, code: str, field: str, message: str) -> None:
        details = [{"field": field, "message": message}]
        response = create_error_response(code=code, message=message, details=details)

        assert response["error"]["details"] == details


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"] == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_missing_token_is_unauthorized(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/roommates/profile")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "AUTH_REQUIRED"

    @pytest.mark.asyncio
    async def test_invalid_token_is_unauthorized(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/v1/roommates/profile",
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_student_is_forbidden(
        self, client: AsyncClient, make_user, auth_headers
    ) -> None:
        landlord = await make_user(role=UserRoleEnum.LANDLORD)

        response = await client.get("/api/v1/roommates/profile", headers=auth_headers(landlord))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_blocked_user_is_forbidden(
        self, client: AsyncClient, make_user, auth_headers
    ) -> None:
        blocked = await make_user(is_blocked=True)

        response = await client.get("/api/v1/roommates/profile", headers=auth_headers(blocked))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "USER_BLOCKED"


class TestProfileEndpoints:

    @pytest.mark.asyncio
    async def test_profile_lifecycle(
        self, client: AsyncClient, make_user, auth_headers
    ) -> None:
        user = await make_user()
        headers = auth_headers(user)

        empty = await client.get("/api/v1/roommates/profile", headers=headers)
        assert empty.status_code == 200
        assert empty.json()["data"]["profile"] is None

        created = await client.post(
            "/api/v1/roommates/profile",
            headers=headers,
            json={
                "min_budget": 450,
                "max_budget": 750,
                "cleanliness_level": 4,
                "sleep_schedule": "early",
                "interests": ["chess"],
                "matching_priorities": {"budget": 5},
            },
        )
        assert created.status_code == 200
        data = created.json()["data"]
        assert data["created"] is True
        assert data["profile"]["user_id"] == str(user.id)
        assert data["profile"]["sleep_schedule"] == "early"
        assert data["profile"]["guests_allowed"] == "sometimes"
        assert data["profile"]["university_id"] == str(user.university_id)

        updated = await client.post(
            "/api/v1/roommates/profile",
            headers=headers,
            json={"cleanliness_level": 2},
        )
        assert updated.json()["data"]["created"] is False
        assert updated.json()["data"]["profile"]["sleep_schedule"] is None

        withdrawn = await client.delete("/api/v1/roommates/profile", headers=headers)
        assert withdrawn.status_code == 200
        assert withdrawn.json()["data"]["profile"]["is_active"] is False

        fetched = await client.get("/api/v1/roommates/profile", headers=headers)
        assert fetched.json()["data"]["profile"]["is_active"] is False

    @pytest.mark.asyncio
    async def test_invalid_level_is_validation_error(
        self, client: AsyncClient, make_user, auth_headers
    ) -> None:
        user = await make_user()

        response = await client.post(
            "/api/v1/roommates/profile",
            headers=auth_headers(user),
            json={"cleanliness_level": 7},
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Cleanliness level must be between 1 and 5"
        assert error["details"][0]["field"] == "cleanliness_level"

    @pytest.mark.asyncio
    async def test_malformed_body_is_validation_error(
        self, client: AsyncClient, make_user, auth_headers
    ) -> None:
        user = await make_user()

        response = await client.post(
            "/api/v1/roommates/profile",
            headers=auth_headers(user),
            json={"sleep_schedule": "whenever"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_withdraw_without_profile_not_found(
        self, client: AsyncClient, make_user, auth_headers
    ) -> None:
        user = await make_user()

        response = await client.delete("/api/v1/roommates/profile", headers=auth_headers(user))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestSearchEndpoint:

    @pytest.mark.asyncio
    async def test_search_returns_scored_profiles(
        self, client: AsyncClient, make_user, make_profile, auth_headers
    ) -> None:
        me = await make_user()
        await make_profile(me, major="Law")
        peer = await make_user(first_name="Pia")
        await make_profile(peer, major="Law")

        response = await client.get("/api/v1/roommates/search", headers=auth_headers(me))

        assert response.status_code == 200
        body = response.json()
        data = body["data"]
        assert data["total"] == 1
        assert data["has_profile"] is True
        assert data["is_profile_active"] is True
        item = data["profiles"][0]
        assert item["user"]["first_name"] == "Pia"
        assert item["same_major"] is True
        assert 0 <= item["compatibility_score"] <= 100
        assert body["pagination"] == {
            "limit": 20,
            "offset": 0,
            "total_items": 1,
            "has_next": False,
        }

    @pytest.mark.asyncio
    async def test_other_profiles_hide_private_fields(
        self, client: AsyncClient, make_user, make_profile, auth_headers
    ) -> None:
        """Priorities, the active flag and the university id stay with the owner."""
        alice = await make_user()
        await make_profile(alice)
        bea = await make_user()
        await make_profile(bea, matching_priorities={"budget": 5, "pets": 1}, bio="Quiet")
        private = {"matching_priorities", "is_active", "university_id"}

        search = await client.get("/api/v1/roommates/search", headers=auth_headers(alice))
        found = search.json()["data"]["profiles"][0]["profile"]
        assert found["bio"] == "Quiet"
        assert private.isdisjoint(found)

        await client.post(f"/api/v1/roommates/matches/{bea.id}", headers=auth_headers(alice))
        matches = await client.get("/api/v1/roommates/matches", headers=auth_headers(alice))
        other = matches.json()["data"]["matches"][0]["other_profile"]
        assert other["user_id"] == str(bea.id)
        assert private.isdisjoint(other)

        own = await client.get("/api/v1/roommates/profile", headers=auth_headers(bea))
        assert own.json()["data"]["profile"]["matching_priorities"] == {"budget": 5, "pets": 1}

    @pytest.mark.asyncio
    async def test_search_limit_is_capped(
        self, client: AsyncClient, make_user, auth_headers
    ) -> None:
        me = await make_user()

        response = await client.get(
            "/api/v1/roommates/search",
            headers=auth_headers(me),
            params={"limit": 100},
        )

        assert response.status_code == 200
        assert response.json()["data"]["profiles"] == []
        assert response.json()["pagination"]["limit"] == 50

    @pytest.mark.asyncio
    async def test_search_with_inactive_profile_is_flagged(
        self, client: AsyncClient, make_user, make_profile, auth_headers
    ) -> None:
        me = await make_user()
        await make_profile(me, is_active=False)

        response = await client.get("/api/v1/roommates/search", headers=auth_headers(me))

        data = response.json()["data"]
        assert data["is_profile_active"] is False
        assert data["profiles"] == []
        assert data["message"] == "Activate your profile to search for roommates"


class TestMatchEndpoints:

    @pytest.mark.asyncio
    async def test_request_accept_and_remove(
        self, client: AsyncClient, make_user, make_profile, auth_headers, publisher
    ) -> None:
        alice = await make_user(first_name="Alice", last_name="Kask")
        await make_profile(alice)
        bea = await make_user(first_name="Bea", last_name="Mets")
        await make_profile(bea)

        created = await client.post(
            f"/api/v1/roommates/matches/{bea.id}",
            headers=auth_headers(alice),
            json={"message": "Want to share a flat?"},
        )
        assert created.status_code == 201
        match = created.json()["data"]["match"]
        assert match["status"] == "pending"
        assert match["requester_id"] == str(alice.id)
        assert 0 <= match["compatibility_score"] <= 100

        assert len(publisher.published) == 1
        pushed_to, payload = publisher.published[0]
        assert pushed_to == bea.id
        assert payload["title"] == "New Roommate Request"
        assert payload["message"] == (
            'Alice Kask wants to connect with you as a roommate: "Want to share a flat?"'
        )

        received = await client.get("/api/v1/roommates/matches", headers=auth_headers(bea))
        items = received.json()["data"]["matches"]
        assert len(items) == 1
        assert items[0]["is_sender"] is False
        assert items[0]["other_user"]["first_name"] == "Alice"
        assert items[0]["other_profile"]["user_id"] == str(alice.id)

        accepted = await client.put(
            f"/api/v1/roommates/matches/{match['id']}",
            headers=auth_headers(bea),
            json={"status": "accepted"},
        )
        assert accepted.status_code == 200
        assert accepted.json()["data"]["match"]["status"] == "accepted"
        assert publisher.published[-1][0] == alice.id

        again = await client.put(
            f"/api/v1/roommates/matches/{match['id']}",
            headers=auth_headers(bea),
            json={"status": "rejected"},
        )
        assert again.status_code == 400
        assert again.json()["error"]["code"] == "ALREADY_RESPONDED"

        removed = await client.delete(
            f"/api/v1/roommates/matches/{match['id']}",
            headers=auth_headers(alice),
        )
        assert removed.status_code == 204

        remaining = await client.get("/api/v1/roommates/matches", headers=auth_headers(alice))
        assert remaining.json()["data"]["matches"] == []

    @pytest.mark.asyncio
    async def test_reverse_duplicate_conflicts(
        self, client: AsyncClient, make_user, make_profile, auth_headers
    ) -> None:
        alice = await make_user()
        await make_profile(alice)
        bea = await make_user()
        await make_profile(bea)
        first = await client.post(
            f"/api/v1/roommates/matches/{bea.id}", headers=auth_headers(alice)
        )
        assert first.status_code == 201

        response = await client.post(
            f"/api/v1/roommates/matches/{alice.id}", headers=auth_headers(bea)
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "MATCH_EXISTS"

    @pytest.mark.asyncio
    async def test_self_match_rejected(
        self, client: AsyncClient, make_user, make_profile, auth_headers
    ) -> None:
        alice = await make_user()
        await make_profile(alice)

        response = await client.post(
            f"/api/v1/roommates/matches/{alice.id}", headers=auth_headers(alice)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "SELF_MATCH"

    @pytest.mark.asyncio
    async def test_gender_mismatch_rejected(
        self, client: AsyncClient, make_user, make_profile, auth_headers
    ) -> None:
        alice = await make_user(gender=GenderEnum.FEMALE)
        await make_profile(alice)
        bob = await make_user(gender=GenderEnum.MALE)
        await make_profile(bob)

        response = await client.post(
            f"/api/v1/roommates/matches/{bob.id}", headers=auth_headers(alice)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "GENDER_MISMATCH"

    @pytest.mark.asyncio
    async def test_unknown_target_not_found(
        self, client: AsyncClient, make_user, make_profile, auth_headers
    ) -> None:
        alice = await make_user()
        await make_profile(alice)

        response = await client.post(
            f"/api/v1/roommates/matches/{uuid.uuid4()}", headers=auth_headers(alice)
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requester_cannot_respond(
        self, client: AsyncClient, make_user, make_profile, auth_headers
    ) -> None:
        alice = await make_user()
        await make_profile(alice)
        bea = await make_user()
        await make_profile(bea)
        created = await client.post(
            f"/api/v1/roommates/matches/{bea.id}", headers=auth_headers(alice)
        )
        match_id = created.json()["data"]["match"]["id"]

        response = await client.put(
            f"/api/v1/roommates/matches/{match_id}",
            headers=auth_headers(alice),
            json={"status": "accepted"},
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "NOT_RECIPIENT"

    @pytest.mark.asyncio
    async def test_invalid_decision_rejected(
        self, client: AsyncClient, make_user, make_profile, auth_headers
    ) -> None:
        alice = await make_user()
        await make_profile(alice)
        bea = await make_user()
        await make_profile(bea)
        created = await client.post(
            f"/api/v1/roommates/matches/{bea.id}", headers=auth_headers(alice)
        )
        match_id = created.json()["data"]["match"]["id"]

        response = await client.put(
            f"/api/v1/roommates/matches/{match_id}",
            headers=auth_headers(bea),
            json={"status": "maybe"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Status must be 'accepted' or 'rejected'"

    @pytest.mark.asyncio
    async def test_outsider_cannot_delete(
        self, client: AsyncClient, make_user, make_profile, auth_headers
    ) -> None:
        alice = await make_user()
        await make_profile(alice)
        bea = await make_user()
        await make_profile(bea)
        carol = await make_user()
        created = await client.post(
            f"/api/v1/roommates/matches/{bea.id}", headers=auth_headers(alice)
        )
        match_id = created.json()["data"]["match"]["id"]

        response = await client.delete(
            f"/api/v1/roommates/matches/{match_id}", headers=auth_headers(carol)
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "NOT_PARTICIPANT"

    @pytest.mark.asyncio
    async def test_status_filter_rejects_unknown_value(
        self, client: AsyncClient, make_user, auth_headers
    ) -> None:
        alice = await make_user()

        response = await client.get(
            "/api/v1/roommates/matches",
            headers=auth_headers(alice),
            params={"status": "archived"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
