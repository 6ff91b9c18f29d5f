import pytest

from domain.common.exceptions import (
    AccessForbiddenException,
    InsufficientPermissionException,
    MembershipNotFoundException,
    ProjectNotFoundException,
)
from domain.membership import MembershipResolver, RoleFlag
from application.services.access_service import AccessService


@pytest.fixture
def resolver(uow_factory):
    uow = uow_factory(readonly=True)
    return MembershipResolver(uow.membership_repository, uow.project_repository)


@pytest.mark.asyncio
async def test_team_role_from_membership_row(store, resolver):
    store.add_team("t1", {"alice": 4})
    assert await resolver.get_team_role("t1", "alice") == 4


@pytest.mark.asyncio
async def test_team_role_missing_row_is_not_found(store, resolver):
    store.add_team("t1", {"alice": 4})
    with pytest.raises(MembershipNotFoundException):
        await resolver.get_team_role("t1", "bob")


@pytest.mark.asyncio
async def test_project_role_prefers_project_membership(store, resolver):
    store.add_team("t1", {"alice": 1})
    store.add_project("p1", team_id="t1", members={"alice": 8})
    assert await resolver.get_project_role("p1", "alice") == 8


@pytest.mark.asyncio
async def test_project_role_falls_back_to_team_role(store, resolver):
    store.add_team("T", {"alice": 2})
    store.add_project("p1", team_id="T")
    assert await resolver.get_project_role("p1", "alice") == 2


@pytest.mark.asyncio
async def test_project_role_fallback_without_team_membership(store, resolver):
    store.add_team("T")
    store.add_project("p1", team_id="T")
    with pytest.raises(MembershipNotFoundException):
        await resolver.get_project_role("p1", "alice")


@pytest.mark.asyncio
async def test_personal_project_without_row_is_forbidden(store, resolver):
    store.add_project("personal", members={"owner": 8})
    with pytest.raises(AccessForbiddenException):
        await resolver.get_project_role("personal", "stranger")


@pytest.mark.asyncio
async def test_unknown_project_is_not_found(resolver):
    with pytest.raises(ProjectNotFoundException):
        await resolver.get_project_role("missing", "alice")


@pytest.mark.asyncio
async def test_require_team_role_rejects_lower_tier(store, resolver):
    store.add_team("t1", {"editor": 2})
    with pytest.raises(InsufficientPermissionException) as exc:
        await resolver.require_team_role("t1", "editor", RoleFlag.ADMIN)
    assert exc.value.details == {"role_flags": 2, "required_flags": 4}


@pytest.mark.asyncio
async def test_require_project_role_maps_lookup_failure_to_forbidden(resolver):
    with pytest.raises(AccessForbiddenException):
        await resolver.require_project_role("missing", "alice", RoleFlag.VIEWER)


@pytest.mark.asyncio
async def test_access_service_uses_readonly_unit_of_work(store, uow_factory):
    store.add_team("t1", {"alice": 8})
    seen = []

    def factory(*, readonly=False):
        seen.append(readonly)
        return uow_factory(readonly=readonly)

    service = AccessService(factory)
    assert await service.require_team_role("t1", "alice", RoleFlag.OWNER) == 8
    assert seen == [True]
