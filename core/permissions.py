# module -> allowed actions, per role. "admin" bypasses the table entirely.
ROLE_PERMISSIONS: dict[str, dict[str, set[str]]] = {
    "manager": {
        "products": {"create", "read", "update", "delete"},
        "purchases": {"create", "read", "update", "delete"},
        "catalog": {"create", "read", "update", "delete"},
        "inventory": {"read"},
    },
    "staff": {
        "products": {"create", "read", "update"},
        "purchases": {"create", "read"},
        "catalog": {"read"},
        "inventory": {"read"},
    },
    "viewer": {
        "products": {"read"},
        "purchases": {"read"},
        "catalog": {"read"},
    },
}


def is_allowed(role: str | None, module: str, action: str) -> bool:
    if role == "admin":
        return True
    actions = ROLE_PERMISSIONS.get(role or "", {}).get(module)
    return bool(actions) and action in actions
