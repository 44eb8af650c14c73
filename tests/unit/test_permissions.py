from core.permissions import is_allowed


def test_admin_is_allowed_everything():
    assert is_allowed("admin", "products", "delete")
    assert is_allowed("admin", "admin", "reconcile")


def test_role_permissions():
    assert is_allowed("manager", "purchases", "update")
    assert is_allowed("staff", "products", "create")
    assert not is_allowed("staff", "products", "delete")
    assert not is_allowed("viewer", "purchases", "create")


def test_unknown_role_or_module_is_denied():
    assert not is_allowed(None, "products", "read")
    assert not is_allowed("intern", "products", "read")
    assert not is_allowed("manager", "admin", "reconcile")
