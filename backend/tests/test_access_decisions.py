"""Tests for the access decision functions."""
import itertools

import pytest

from gatekeeper.auth.decisions import (
    can_perform_action,
    has_all_permissions,
    has_any_permission,
    has_permission,
    resolve_permissions,
    role_at_least,
)
from gatekeeper.auth.registry import Action, Resource, Role, get_role_permissions
from gatekeeper.errors import InvalidArgumentError

HELD = ["user:read", "resume:upload", "auth:login"]

PERMISSION_SAMPLES = [
    "user:read",
    "user:manage",
    "resume:upload",
    "auth:login",
    "slot:book",
    "",
    "user",
    "user:read ",
    "USER:READ",
]

PRINCIPAL_SAMPLES = [
    [],
    ["user:read"],
    HELD,
    get_role_permissions("guest"),
    get_role_permissions("tenant_admin"),
    ["unknown:thing", "user:manage"],
]


class TestHasPermission:
    @pytest.mark.parametrize(
        "principal,permission", list(itertools.product(PRINCIPAL_SAMPLES, PERMISSION_SAMPLES))
    )
    def test_exact_membership(self, principal, permission):
        assert has_permission(principal, permission) is (permission in principal)

    def test_no_prefix_or_hierarchy_matching(self):
        assert has_permission(["user:manage"], "user:read") is False
        assert has_permission(["user"], "user:read") is False
        assert has_permission(["user:read"], "user") is False

    def test_unknown_permission_is_not_held(self):
        assert has_permission(HELD, "teleport:now") is False

    def test_empty_principal_holds_nothing(self):
        assert has_permission([], "auth:login") is False

    def test_accepts_sets_and_generators(self):
        assert has_permission({"user:read"}, "user:read") is True
        assert has_permission(frozenset(HELD), "auth:login") is True
        assert has_permission((p for p in HELD), "resume:upload") is True

    def test_bare_string_principal_is_rejected(self):
        # Substring membership would otherwise grant "user:read" from "user:read_all"
        with pytest.raises(InvalidArgumentError):
            has_permission("user:read_all", "user:read")  # type: ignore[arg-type]

    def test_invalid_argument_is_a_type_error(self):
        with pytest.raises(TypeError):
            has_permission(None, "user:read")  # type: ignore[arg-type]

    def test_non_string_permission_is_rejected(self):
        with pytest.raises(InvalidArgumentError):
            has_permission(HELD, None)  # type: ignore[arg-type]


class TestHasAnyPermission:
    def test_one_match_is_enough(self):
        assert has_any_permission(HELD, ["billing:manage", "auth:login"]) is True

    def test_no_match(self):
        assert has_any_permission(HELD, ["billing:manage", "tenant:delete"]) is False

    def test_empty_request_is_false(self):
        assert has_any_permission(HELD, []) is False

    def test_order_does_not_matter(self):
        requested = ["billing:manage", "auth:login", "tenant:delete"]
        for permutation in itertools.permutations(requested):
            assert has_any_permission(HELD, list(permutation)) is True

    def test_bare_string_request_is_rejected(self):
        with pytest.raises(InvalidArgumentError):
            has_any_permission(HELD, "auth:login")  # type: ignore[arg-type]


class TestHasAllPermissions:
    def test_all_held(self):
        assert has_all_permissions(HELD, ["user:read", "auth:login"]) is True

    def test_one_missing(self):
        assert has_all_permissions(HELD, ["user:read", "user:delete"]) is False

    @pytest.mark.parametrize("principal", PRINCIPAL_SAMPLES)
    def test_empty_request_is_vacuously_true(self, principal):
        assert has_all_permissions(principal, []) is True

    def test_duplicates_in_request(self):
        assert has_all_permissions(HELD, ["auth:login", "auth:login"]) is True

    @pytest.mark.parametrize("principal", PRINCIPAL_SAMPLES)
    @pytest.mark.parametrize(
        "requested",
        [["user:read"], ["user:read", "auth:login"], ["auth:login", "slot:book"], ["tenant:read"]],
    )
    def test_all_implies_any(self, principal, requested):
        if has_all_permissions(principal, requested):
            assert has_any_permission(principal, requested)

    def test_any_does_not_imply_all(self):
        requested = ["user:read", "user:delete"]
        assert has_any_permission(HELD, requested) is True
        assert has_all_permissions(HELD, requested) is False

    def test_non_string_member_is_rejected(self):
        with pytest.raises(InvalidArgumentError):
            has_all_permissions(HELD, ["user:read", 7])  # type: ignore[list-item]


class TestCanPerformAction:
    @pytest.mark.parametrize("principal", PRINCIPAL_SAMPLES)
    @pytest.mark.parametrize("resource", list(Resource))
    @pytest.mark.parametrize("action", [Action.READ, Action.MANAGE, Action.DELETE])
    def test_matches_has_permission(self, principal, resource, action):
        expected = has_permission(principal, f"{resource.value}:{action.value}")
        assert can_perform_action(principal, resource, action) is expected
        assert can_perform_action(principal, resource.value, action.value) is expected

    def test_user_read(self):
        assert can_perform_action(HELD, "user", "read") is True
        assert can_perform_action(HELD, "user", "delete") is False

    def test_hand_named_permissions_need_has_permission(self):
        # "auth" is not a resource and "login" is not an action
        assert has_permission(HELD, "auth:login") is True
        assert "auth" not in {resource.value for resource in Resource}
        assert "login" not in {action.value for action in Action}

    def test_non_string_resource_rejected(self):
        with pytest.raises(InvalidArgumentError):
            can_perform_action(HELD, None, "read")  # type: ignore[arg-type]


class TestResolvePermissions:
    def test_role_only(self):
        assert resolve_permissions("guest") == frozenset(get_role_permissions("guest"))

    def test_role_plus_direct_grants(self):
        resolved = resolve_permissions(Role.GUEST, ["billing:read"])
        assert "billing:read" in resolved
        assert "auth:register" in resolved

    def test_unknown_role_contributes_nothing(self):
        assert resolve_permissions("root", ["user:read"]) == frozenset({"user:read"})

    def test_no_role_no_grants(self):
        assert resolve_permissions() == frozenset()


class TestRoleAtLeast:
    @pytest.mark.parametrize(
        "role,minimum,expected",
        [
            ("super_admin", "tenant_admin", True),
            ("tenant_admin", "tenant_admin", True),
            ("group_admin", "tenant_admin", False),
            ("guest", "user", False),
            ("root", "guest", False),
            ("super_admin", "root", False),
            (None, "guest", False),
        ],
    )
    def test_ordering(self, role, minimum, expected):
        assert role_at_least(role, minimum) is expected
