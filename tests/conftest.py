import os
import sys
import uuid

import pytest

# Path setup before any project imports to satisfy E402
ROOT = os.path.dirname(__file__)
PARENT = os.path.abspath(os.path.join(ROOT, ".."))
if PARENT not in sys.path:  # pragma: no cover - environment dependent
    sys.path.insert(0, PARENT)


def _lazy_imports():  # isolate heavy imports & satisfy lint ordering
    from carbon.app_factory import create_app  # noqa: E402
    from carbon.db import create_all, get_session  # noqa: E402
    from carbon.factors import seed_default_factors  # noqa: E402

    return create_app, create_all, get_session, seed_default_factors


@pytest.fixture(scope="session")
def app_session(tmp_path_factory):
    create_app, create_all, get_session, seed_default_factors = _lazy_imports()
    db_file = tmp_path_factory.mktemp("db") / "test_app.db"
    url = f"sqlite:///{db_file}"
    app = create_app({"TESTING": True, "SECRET_KEY": "test", "database_url": url})
    with app.app_context():
        create_all()
        db = get_session()
        try:
            seed_default_factors(db)
        finally:
            db.close()
    return app


@pytest.fixture(scope="function")
def client(app_session):
    c = app_session.test_client()
    # Ensure clean base environ to avoid session leakage between tests
    c.environ_base = {}
    return c


@pytest.fixture
def user_id():
    """Fresh user per test; the DB is shared across the session."""
    return f"u-{uuid.uuid4().hex[:12]}"


@pytest.fixture
def user_headers(user_id):
    return {"X-User-Id": user_id}


@pytest.fixture
def admin_headers():
    return {"X-User-Id": "admin-1", "X-User-Role": "admin"}
