"""
Tests for organization memberships and organization-scoped permissions
"""

import pytest
from sqlalchemy import select

from docflow.constants.roles import MANAGE_MEMBERS, READ_ORGANIZATION, MemberRole
from docflow.exceptions import (
    AuthorizationError,
    DuplicateResourceError,
    MembershipNotFoundError,
    UserNotFoundError,
)
from docflow.models import OrganizationMember
from docflow.services import membership_service


@pytest.fixture
async def owner(make_user):
    return await make_user(email="owner@example.com")


@pytest.fixture
async def organization(owner, make_organization):
    return await make_organization(owner)


class TestCheckPermission:
    async def test_owner_passes_manage_members(self, test_db, organization, owner):
        membership = await membership_service.check_permission(organization.id, owner.id, MANAGE_MEMBERS, test_db)
        assert membership.role == MemberRole.OWNER

    async def test_non_member_denied(self, test_db, organization, test_user):
        with pytest.raises(AuthorizationError) as exc_info:
            await membership_service.check_permission(organization.id, test_user.id, READ_ORGANIZATION, test_db)
        assert exc_info.value.message == "Insufficient permissions in organization"

    async def test_role_outside_set_denied(self, test_db, organization, test_user, make_membership):
        await make_membership(organization, test_user, MemberRole.EDITOR)
        with pytest.raises(AuthorizationError):
            await membership_service.check_permission(organization.id, test_user.id, MANAGE_MEMBERS, test_db)

    async def test_roles_are_not_ranked(self, test_db, organization, test_user, make_membership):
        """An admin is rejected by a set naming only viewers"""
        await make_membership(organization, test_user, MemberRole.ADMIN)
        with pytest.raises(AuthorizationError):
            await membership_service.check_permission(organization.id, test_user.id, {MemberRole.VIEWER}, test_db)

    async def test_inactive_membership_denied(self, test_db, organization, test_user, make_membership):
        member = await make_membership(organization, test_user, MemberRole.ADMIN)
        member.is_active = False
        await test_db.commit()
        with pytest.raises(AuthorizationError):
            await membership_service.check_permission(organization.id, test_user.id, READ_ORGANIZATION, test_db)


class TestAddMember:
    async def test_add_defaults_to_viewer(self, test_db, organization, owner, test_user):
        member = await membership_service.add_member(organization.id, test_user.id, owner.id, test_db)
        assert member.role == MemberRole.VIEWER
        assert member.is_active
        assert member.user.email == test_user.email

    async def test_add_with_role(self, test_db, organization, owner, test_user):
        member = await membership_service.add_member(
            organization.id, test_user.id, owner.id, test_db, role=MemberRole.EDITOR
        )
        assert member.role == MemberRole.EDITOR

    async def test_editor_cannot_add(self, test_db, organization, make_user, make_membership):
        editor = await make_user()
        target = await make_user()
        await make_membership(organization, editor, MemberRole.EDITOR)
        with pytest.raises(AuthorizationError):
            await membership_service.add_member(organization.id, target.id, editor.id, test_db)

    async def test_missing_user(self, test_db, organization, owner):
        with pytest.raises(UserNotFoundError):
            await membership_service.add_member(organization.id, 9999, owner.id, test_db)

    async def test_duplicate_active_membership(self, test_db, organization, owner, test_user):
        await membership_service.add_member(organization.id, test_user.id, owner.id, test_db)
        with pytest.raises(DuplicateResourceError):
            await membership_service.add_member(organization.id, test_user.id, owner.id, test_db)

    async def test_owner_role_cannot_be_granted(self, test_db, organization, owner, test_user):
        with pytest.raises(AuthorizationError):
            await membership_service.add_member(
                organization.id, test_user.id, owner.id, test_db, role=MemberRole.OWNER
            )

    async def test_rejoin_after_removal(self, test_db, organization, owner, test_user):
        member = await membership_service.add_member(organization.id, test_user.id, owner.id, test_db)
        await membership_service.remove_member(organization.id, member.id, owner.id, test_db)
        again = await membership_service.add_member(organization.id, test_user.id, owner.id, test_db)
        assert again.id != member.id
        assert again.is_active


class TestUpdateMemberRole:
    async def test_admin_promotes_viewer(self, test_db, organization, make_user, make_membership):
        admin = await make_user()
        viewer = await make_user()
        await make_membership(organization, admin, MemberRole.ADMIN)
        member = await make_membership(organization, viewer, MemberRole.VIEWER)

        updated = await membership_service.update_member_role(
            organization.id, member.id, MemberRole.EDITOR, admin.id, test_db
        )
        assert updated.role == MemberRole.EDITOR

    async def test_member_of_other_organization_not_found(
        self, test_db, organization, owner, make_user, make_organization, make_membership
    ):
        other_owner = await make_user()
        other = await make_organization(other_owner, subdomain="globex", name="Globex")
        target = await make_user()
        member = await make_membership(other, target, MemberRole.VIEWER)

        with pytest.raises(MembershipNotFoundError):
            await membership_service.update_member_role(organization.id, member.id, MemberRole.EDITOR, owner.id, test_db)

    async def test_owner_role_cannot_change(self, test_db, organization, owner, make_user, make_membership):
        admin = await make_user()
        await make_membership(organization, admin, MemberRole.ADMIN)
        result = await test_db.execute(
            select(OrganizationMember).where(
                OrganizationMember.organization_id == organization.id,
                OrganizationMember.role == MemberRole.OWNER,
            )
        )
        owner_row = result.scalars().one()

        with pytest.raises(AuthorizationError):
            await membership_service.update_member_role(
                organization.id, owner_row.id, MemberRole.VIEWER, admin.id, test_db
            )


class TestRemoveMember:
    async def _owner_row(self, test_db, organization):
        result = await test_db.execute(
            select(OrganizationMember).where(
                OrganizationMember.organization_id == organization.id,
                OrganizationMember.role == MemberRole.OWNER,
            )
        )
        return result.scalars().one()

    async def test_remove_is_soft_delete(self, test_db, organization, owner, test_user, make_membership):
        member = await make_membership(organization, test_user, MemberRole.EDITOR)
        await membership_service.remove_member(organization.id, member.id, owner.id, test_db)

        await test_db.refresh(member)
        assert member.is_active is False
        assert await membership_service.get_active_membership(organization.id, test_user.id, test_db) is None

    async def test_owner_cannot_be_removed(self, test_db, organization, owner, make_user, make_membership):
        admin = await make_user()
        await make_membership(organization, admin, MemberRole.ADMIN)
        owner_row = await self._owner_row(test_db, organization)

        with pytest.raises(AuthorizationError):
            await membership_service.remove_member(organization.id, owner_row.id, admin.id, test_db)

        await test_db.refresh(owner_row)
        assert owner_row.is_active

    async def test_removed_member_not_found_again(self, test_db, organization, owner, test_user, make_membership):
        member = await make_membership(organization, test_user, MemberRole.VIEWER)
        await membership_service.remove_member(organization.id, member.id, owner.id, test_db)
        with pytest.raises(MembershipNotFoundError):
            await membership_service.remove_member(organization.id, member.id, owner.id, test_db)


class TestListings:
    async def test_list_members(self, test_db, organization, owner, test_user, make_membership):
        await make_membership(organization, test_user, MemberRole.VIEWER)
        members = await membership_service.list_members(organization.id, test_user.id, test_db)
        assert {m.user_id for m in members} == {owner.id, test_user.id}

    async def test_user_organizations_with_roles(
        self, test_db, organization, owner, make_user, make_organization, make_membership
    ):
        other = await make_organization(await make_user(), subdomain="globex", name="Globex")
        await make_membership(other, owner, MemberRole.VIEWER)

        rows = await membership_service.get_user_organizations(owner.id, test_db)
        assert {(org.subdomain, role) for org, role in rows} == {
            ("acme", MemberRole.OWNER),
            ("globex", MemberRole.VIEWER),
        }

        writable = await membership_service.get_writable_organizations(owner.id, test_db)
        assert [org.subdomain for org, _role in writable] == ["acme"]

    async def test_inactive_organizations_excluded(self, test_db, organization, owner):
        organization.is_active = False
        await test_db.commit()
        assert await membership_service.get_user_organizations(owner.id, test_db) == []
