import itertools

import pytest

from domain.membership import RoleFlag, has_permission, role_name


TIERS = [1, 2, 4, 8]


@pytest.mark.parametrize("user_flags,required", list(itertools.product(TIERS, TIERS)))
def test_has_permission_is_ordinal(user_flags, required):
    assert has_permission(user_flags, required) is (user_flags >= required)


def test_has_permission_examples():
    assert has_permission(4, 2) is True
    assert has_permission(2, 4) is False
    # 6 = Editor|Admin 并不包含 Owner 能力
    assert has_permission(6, RoleFlag.OWNER) is False
    assert has_permission(6, RoleFlag.ADMIN) is True


@pytest.mark.parametrize(
    "flags,expected",
    [
        (8, "Owner"),
        (12, "Owner"),
        (15, "Owner"),
        (4, "Admin"),
        (6, "Admin"),
        (2, "Editor"),
        (3, "Editor"),
        (1, "Viewer"),
        (0, "Viewer"),
    ],
)
def test_role_name_uses_highest_set_bit(flags, expected):
    assert role_name(flags) == expected
