# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Integration tests for the role and permission API."""

import json
import uuid

import pytest

from src.models import Lead, Role, UserPermission
from src.rbac import CORE_RESOURCES, build_manager_permissions


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestAuthentication:
    """Tests for identity handling."""

    def test_missing_identity_is_rejected(self, client, roles):
        response = client.get("/api/v1/rbac/roles")
        assert response.status_code == 401

    def test_unknown_or_malformed_identity_is_rejected(self, client, roles):
        for value in (str(uuid.uuid4()), "not-a-uuid"):
            response = client.get("/api/v1/rbac/roles", headers={"X-User-Id": value})
            assert response.status_code == 401

    def test_inactive_user_is_rejected(self, client, make_user, roles, auth_headers):
        user = make_user("former", roles["Super Administrator"], is_active=False)
        response = client.get("/api/v1/rbac/roles", headers=auth_headers(user))
        assert response.status_code == 401


class TestRoleRoutes:
    """Tests for role management."""

    def test_list_resources(self, client, super_admin, auth_headers):
        response = client.get("/api/v1/rbac/resources", headers=auth_headers(super_admin))
        assert response.status_code == 200
        assert [r["key"] for r in response.json()] == [r["key"] for r in CORE_RESOURCES]

    def test_list_roles(self, client, super_admin, auth_headers):
        response = client.get("/api/v1/rbac/roles", headers=auth_headers(super_admin))
        assert response.status_code == 200
        assert {role["name"] for role in response.json()} == {
            "Administrator",
            "Manager",
            "Sales",
            "Super Administrator",
        }

    def test_role_management_is_reserved_to_super_admin(
        self, client, make_user, roles, auth_headers
    ):
        admin = make_user("admin", roles["Administrator"])
        response = client.get("/api/v1/rbac/roles", headers=auth_headers(admin))
        assert response.status_code == 403

    def test_get_role_returns_parsed_permissions(self, client, super_admin, roles, auth_headers):
        role = roles["Manager"]
        response = client.get(f"/api/v1/rbac/roles/{role.id}", headers=auth_headers(super_admin))
        assert response.status_code == 200
        assert response.json()["permissions"] == build_manager_permissions()

    def test_get_missing_role(self, client, super_admin, auth_headers):
        response = client.get(
            f"/api/v1/rbac/roles/{uuid.uuid4()}", headers=auth_headers(super_admin)
        )
        assert response.status_code == 404

    def test_create_role_from_template(self, client, super_admin, auth_headers):
        response = client.post(
            "/api/v1/rbac/roles",
            json={"name": "Senior Sales", "template": "manager"},
            headers=auth_headers(super_admin),
        )
        assert response.status_code == 201
        assert response.json()["permissions"] == build_manager_permissions()

    def test_create_role_with_permissions(self, client, super_admin, auth_headers):
        response = client.post(
            "/api/v1/rbac/roles",
            json={"name": "Auditor", "permissions": {"reports": {"view": "all", "export": False}}},
            headers=auth_headers(super_admin),
        )
        assert response.status_code == 201
        assert response.json()["permissions"] == {"reports": {"view": "all", "export": False}}

    def test_create_role_rejects_invalid_permissions(self, client, super_admin, auth_headers):
        for permissions in ({"reports": {"view": "everyone"}}, {"reports": "all"}, ["reports"]):
            response = client.post(
                "/api/v1/rbac/roles",
                json={"name": "Broken", "permissions": permissions},
                headers=auth_headers(super_admin),
            )
            assert response.status_code == 422

    def test_create_role_requires_permissions_or_template(self, client, super_admin, auth_headers):
        response = client.post(
            "/api/v1/rbac/roles", json={"name": "Empty"}, headers=auth_headers(super_admin)
        )
        assert response.status_code == 400

    def test_create_duplicate_role(self, client, super_admin, auth_headers):
        response = client.post(
            "/api/v1/rbac/roles",
            json={"name": "Sales", "template": "sales"},
            headers=auth_headers(super_admin),
        )
        assert response.status_code == 400

    def test_update_role_with_cascade(
        self, client, super_admin, make_user, roles, auth_headers, db_session
    ):
        role = roles["Sales"]
        rep = make_user("rep", role)

        response = client.put(
            f"/api/v1/rbac/roles/{role.id}",
            json={"permissions": {"leads": {"view": "team"}}, "apply_to_users": True},
            headers=auth_headers(super_admin),
        )

        assert response.status_code == 200
        assert response.json()["permissions"] == {"leads": {"view": "team"}}
        override = db_session.query(UserPermission).filter_by(user_id=rep.id).one()
        assert override.permissions == {"leads": {"view": "team"}}

    def test_delete_deactivates_role(self, client, super_admin, roles, auth_headers):
        role = roles["Manager"]
        headers = auth_headers(super_admin)

        response = client.delete(f"/api/v1/rbac/roles/{role.id}", headers=headers)
        assert response.status_code == 204

        listed = client.get("/api/v1/rbac/roles", headers=headers).json()
        assert "Manager" not in [r["name"] for r in listed]
        listed = client.get("/api/v1/rbac/roles?include_inactive=true", headers=headers).json()
        assert "Manager" in [r["name"] for r in listed]

    def test_apply_permissions(self, client, super_admin, make_user, roles, auth_headers):
        role = roles["Sales"]
        reps = [make_user(f"rep{i}", role) for i in range(2)]

        response = client.post(
            f"/api/v1/rbac/roles/{role.id}/apply-permissions",
            json={"permissions": {"leads": {"view": "all"}}},
            headers=auth_headers(super_admin),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["users_count"] == 2
        assert sorted(body["succeeded"]) == sorted(str(rep.id) for rep in reps)
        assert body["failed"] == []

    def test_apply_permissions_without_users(self, client, super_admin, roles, auth_headers):
        response = client.post(
            f"/api/v1/rbac/roles/{roles['Manager'].id}/apply-permissions",
            headers=auth_headers(super_admin),
        )
        assert response.status_code == 400

    def test_seed_roles_is_idempotent(self, client, super_admin, auth_headers):
        response = client.post("/api/v1/rbac/roles/seed", headers=auth_headers(super_admin))
        assert response.status_code == 201
        assert response.json() == []


class TestUserPermissionRoutes:
    """Tests for per-user permission management."""

    def test_get_role_default_permissions(self, client, super_admin, sales_user, auth_headers):
        response = client.get(
            f"/api/v1/users/{sales_user.id}/permissions", headers=auth_headers(super_admin)
        )
        assert response.status_code == 200
        assert response.json()["is_role_default"] is True
        assert response.json()["permissions"]["leads"]["view"] == "self"

    def test_customize_and_reset(self, client, super_admin, sales_user, auth_headers):
        headers = auth_headers(super_admin)
        url = f"/api/v1/users/{sales_user.id}/permissions"

        response = client.put(
            url, json={"permissions": {"leads": {"view": "team"}}}, headers=headers
        )
        assert response.status_code == 200
        assert response.json() == {
            "user_id": str(sales_user.id),
            "permissions": {"leads": {"view": "team"}},
            "is_role_default": False,
        }

        response = client.put(url, json={"reset_to_role": True}, headers=headers)
        assert response.status_code == 200
        assert response.json()["is_role_default"] is True

    def test_sales_cannot_edit_users(self, client, sales_user, auth_headers):
        response = client.put(
            f"/api/v1/users/{sales_user.id}/permissions",
            json={"permissions": {"roles": {"update": "all"}}},
            headers=auth_headers(sales_user),
        )
        assert response.status_code == 403

    def test_user_without_role_or_override(self, client, super_admin, make_user, auth_headers):
        user = make_user("norole")
        response = client.get(
            f"/api/v1/users/{user.id}/permissions", headers=auth_headers(super_admin)
        )
        assert response.status_code == 404

    def test_change_role(self, client, super_admin, sales_user, roles, auth_headers):
        response = client.put(
            f"/api/v1/users/{sales_user.id}/role",
            json={"role_id": str(roles["Manager"].id)},
            headers=auth_headers(super_admin),
        )
        assert response.status_code == 200
        assert response.json()["role_id"] == str(roles["Manager"].id)

    def test_admin_cannot_change_roles(self, client, make_user, sales_user, roles, auth_headers):
        admin = make_user("admin", roles["Administrator"])
        response = client.put(
            f"/api/v1/users/{sales_user.id}/role",
            json={"role_id": str(roles["Administrator"].id)},
            headers=auth_headers(admin),
        )
        assert response.status_code == 403


class TestCurrentUserRoutes:
    """Tests for the current user's permission introspection."""

    def test_my_permissions(self, client, sales_user, auth_headers):
        response = client.get("/api/v1/auth/me/permissions", headers=auth_headers(sales_user))
        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "Sales"
        assert body["permissions"]["leads"]["view"] == "self"
        assert "leads" in body["accessible_resources"]
        assert "roles" not in body["accessible_resources"]

    def test_check_access(self, client, sales_user, auth_headers):
        headers = auth_headers(sales_user)
        response = client.post("/api/v1/auth/check-access", json={"path": "/leads/1"}, headers=headers)
        assert response.json() == {"has_access": True, "resource": "leads"}

        response = client.post(
            "/api/v1/auth/check-access", json={"path": "/admin/roles"}, headers=headers
        )
        assert response.json() == {"has_access": False, "resource": "roles"}

    def test_check_access_anonymous(self, client):
        response = client.post("/api/v1/auth/check-access", json={"path": "/sign-in"})
        assert response.json()["has_access"] is True
        response = client.post("/api/v1/auth/check-access", json={"path": "/leads"})
        assert response.json()["has_access"] is False


class TestLeadRoutes:
    """Tests for scoped lead listing."""

    def test_leads_follow_scope(
        self, client, db_session, make_user, roles, bolivia, peru, auth_headers
    ):
        manager = make_user("manager", roles["Manager"], bolivia)
        seller = make_user("seller", roles["Sales"], bolivia)
        foreigner = make_user("foreigner", roles["Sales"], peru)
        for owner in (seller, foreigner):
            db_session.add(Lead(first_name=owner.name, last_name="X", assigned_to_id=owner.id))
        db_session.commit()

        seen = client.get("/api/v1/leads", headers=auth_headers(seller)).json()
        assert [lead["first_name"] for lead in seen] == ["seller"]

        seen = client.get("/api/v1/leads", headers=auth_headers(manager)).json()
        assert [lead["first_name"] for lead in seen] == ["seller"]

    def test_leads_denied_without_permission(self, client, make_user, auth_headers):
        user = make_user("nobody")
        response = client.get("/api/v1/leads", headers=auth_headers(user))
        assert response.status_code == 403

    def test_create_lead_for_self(self, client, sales_user, auth_headers):
        response = client.post(
            "/api/v1/leads",
            json={"first_name": "Ana", "last_name": "Rojas"},
            headers=auth_headers(sales_user),
        )
        assert response.status_code == 201
        assert response.json()["assigned_to_id"] == str(sales_user.id)

    def test_self_scope_cannot_assign_to_others(
        self, client, sales_user, make_user, roles, bolivia, auth_headers
    ):
        colleague = make_user("colleague", roles["Sales"], bolivia)
        response = client.post(
            "/api/v1/leads",
            json={"first_name": "Ana", "last_name": "Rojas", "assigned_to_id": str(colleague.id)},
            headers=auth_headers(sales_user),
        )
        assert response.status_code == 403

    def test_team_scope_assigns_within_country(
        self, client, make_user, roles, bolivia, peru, auth_headers
    ):
        manager = make_user("manager", roles["Manager"], bolivia)
        local = make_user("local", roles["Sales"], bolivia)
        foreign = make_user("foreign", roles["Sales"], peru)
        headers = auth_headers(manager)

        response = client.post(
            "/api/v1/leads",
            json={"first_name": "Ana", "last_name": "Rojas", "assigned_to_id": str(local.id)},
            headers=headers,
        )
        assert response.status_code == 201

        response = client.post(
            "/api/v1/leads",
            json={"first_name": "Luis", "last_name": "Paz", "assigned_to_id": str(foreign.id)},
            headers=headers,
        )
        assert response.status_code == 403

    def test_unknown_assignee(self, client, super_admin, auth_headers):
        response = client.post(
            "/api/v1/leads",
            json={"first_name": "Ana", "last_name": "Rojas", "assigned_to_id": str(uuid.uuid4())},
            headers=auth_headers(super_admin),
        )
        assert response.status_code == 404


class TestGrantCeiling:
    """Tests that callers cannot hand out permissions they do not hold."""

    @pytest.fixture
    def role_clerk(self, db_session, make_user, bolivia):
        role = Role(
            name="Role Clerk",
            permissions=json.dumps(
                {"roles": {"view": "all", "create": "all", "update": "all"}}
            ),
            is_active=True,
        )
        db_session.add(role)
        db_session.commit()
        return make_user("clerk", role, bolivia)

    def test_admin_cannot_grant_itself_role_management(
        self, client, make_user, roles, auth_headers
    ):
        admin = make_user("admin", roles["Administrator"])
        headers = auth_headers(admin)

        response = client.put(
            f"/api/v1/users/{admin.id}/permissions",
            json={"permissions": {"roles": {"view": "all", "create": "all", "update": "all"}}},
            headers=headers,
        )
        assert response.status_code == 403

        response = client.post(
            "/api/v1/rbac/roles", json={"name": "Owner", "template": "super_admin"}, headers=headers
        )
        assert response.status_code == 403

    def test_admin_customizes_within_own_permissions(
        self, client, make_user, roles, sales_user, auth_headers
    ):
        admin = make_user("admin", roles["Administrator"])
        response = client.put(
            f"/api/v1/users/{sales_user.id}/permissions",
            json={"permissions": {"leads": {"view": "all"}, "roles": {"view": False}}},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200

    def test_role_creation_is_capped(self, client, role_clerk, auth_headers):
        headers = auth_headers(role_clerk)

        response = client.post(
            "/api/v1/rbac/roles", json={"name": "Owner", "template": "super_admin"}, headers=headers
        )
        assert response.status_code == 403

        response = client.post(
            "/api/v1/rbac/roles",
            json={"name": "Role Viewer", "permissions": {"roles": {"view": "all"}}},
            headers=headers,
        )
        assert response.status_code == 201

    def test_role_assignment_is_capped(self, client, role_clerk, roles, auth_headers):
        response = client.put(
            f"/api/v1/users/{role_clerk.id}/role",
            json={"role_id": str(roles["Super Administrator"].id)},
            headers=auth_headers(role_clerk),
        )
        assert response.status_code == 403


class TestTeamScopedUsers:
    """Tests that team-scoped user access stays inside the caller's country."""

    def test_manager_reads_only_own_country(
        self, client, make_user, roles, bolivia, peru, auth_headers
    ):
        manager = make_user("manager", roles["Manager"], bolivia)
        local = make_user("local", roles["Sales"], bolivia)
        foreign = make_user("foreign", roles["Sales"], peru)
        headers = auth_headers(manager)

        response = client.get(f"/api/v1/users/{local.id}/permissions", headers=headers)
        assert response.status_code == 200

        response = client.get(f"/api/v1/users/{foreign.id}/permissions", headers=headers)
        assert response.status_code == 403

    def test_self_update_scope_only_reaches_caller(
        self, client, db_session, make_user, roles, bolivia, auth_headers
    ):
        manager = make_user("manager", roles["Manager"], bolivia)
        colleague = make_user("colleague", roles["Sales"], bolivia)
        db_session.add(UserPermission(user_id=manager.id, permissions={"users": {"update": "self"}}))
        db_session.commit()
        headers = auth_headers(manager)
        body = {"permissions": {"leads": {"view": "self"}}}

        response = client.put(f"/api/v1/users/{colleague.id}/permissions", json=body, headers=headers)
        assert response.status_code == 403

        response = client.put(f"/api/v1/users/{manager.id}/permissions", json=body, headers=headers)
        assert response.status_code == 200


class TestInactiveRoleCascade:
    """Tests that deactivated roles cannot be pushed back to their users."""

    def test_apply_permissions_refused(self, client, super_admin, sales_user, roles, auth_headers):
        role = roles["Sales"]
        headers = auth_headers(super_admin)

        response = client.delete(f"/api/v1/rbac/roles/{role.id}", headers=headers)
        assert response.status_code == 204

        response = client.post(f"/api/v1/rbac/roles/{role.id}/apply-permissions", headers=headers)
        assert response.status_code == 400

        response = client.get("/api/v1/auth/me/permissions", headers=auth_headers(sales_user))
        assert response.json()["accessible_resources"] == []

    def test_update_with_cascade_refused(
        self, client, super_admin, sales_user, roles, auth_headers, db_session
    ):
        role = roles["Sales"]
        response = client.put(
            f"/api/v1/rbac/roles/{role.id}",
            json={"is_active": False, "apply_to_users": True},
            headers=auth_headers(super_admin),
        )
        assert response.status_code == 400
        assert db_session.query(UserPermission).count() == 0
