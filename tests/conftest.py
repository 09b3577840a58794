import os

import pytest

# Tokens are signed and verified with this secret during tests.
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("COMPANIONSHIP_MAX_SCORE", "5")

from auth import security  # noqa: E402
from core.ids import new_id  # noqa: E402
from fakes import build_stores, make_access_token  # noqa: E402
from store.registry import ResourceKind, StoreRegistry, registry  # noqa: E402


@pytest.fixture
def stores():
    """
    Fresh in-memory stores registered in the process-wide registry.
    """
    previous = {kind: registry.get(kind) for kind in registry.kinds()}
    registry.clear()
    created = build_stores(registry)
    yield created
    registry.clear()
    for kind, store in previous.items():
        registry.register(kind, store)


@pytest.fixture
def private_stores():
    """
    In-memory stores in their own registry, untouched by anything else.
    """
    target = StoreRegistry()
    return target, build_stores(target)


@pytest.fixture
def client(stores):
    from fastapi.testclient import TestClient
    from main import app

    # Not used as a context manager: the lifespan (Postgres pool) never runs.
    return TestClient(app)


@pytest.fixture
def make_user(stores):
    def _make(username: str = "gardener") -> tuple[dict, dict]:
        user = {
            "id": new_id(),
            "username": username,
            "email": f"{username}@example.com",
            "password_hash": security.hash_password("correct horse"),
        }
        stores[ResourceKind.USER].records[user["id"]] = user
        token = make_access_token(user_id=user["id"], username=username)
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def add_crop(stores):
    def _add(common_name: str | None, binomial_name: str) -> dict:
        crop = {"id": new_id(), "common_name": common_name, "binomial_name": binomial_name}
        stores[ResourceKind.CROP].records[crop["id"]] = crop
        return crop

    return _add


@pytest.fixture
def add_edge(stores):
    def _add(crop_a: dict, crop_b: dict, compatibility: float) -> dict:
        first, second = sorted((crop_a["id"], crop_b["id"]))
        edge = {"id": new_id(), "crop1": first, "crop2": second, "compatibility": compatibility}
        stores[ResourceKind.COMPANIONSHIP].records[edge["id"]] = edge
        return edge

    return _add
