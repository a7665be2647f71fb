import pytest

fastapi = pytest.importorskip("fastapi")
TestClient = pytest.importorskip("fastapi.testclient").TestClient

from fake_supabase import FakeSupabase  # noqa: E402


@pytest.fixture
def supabase():
    """Data behind every fake client; also serves as the anon and caller-scoped client."""
    return FakeSupabase()


@pytest.fixture
def service_supabase(supabase):
    """Service-role client: same data, separate failure switches."""
    return supabase.view()


@pytest.fixture
def app(supabase, service_supabase, monkeypatch):
    """
    Load the app with every Supabase client dependency pointed at the fakes.
    Rate limiting is off so repeated sign-ins in one session don't hit 429.
    """
    from app.main import app as fastapi_app
    from app.core import dependencies
    from app.core.rate_limit import limiter
    from app.database import supabase_client
    from app.modules.auth.service import clear_auth_cache

    clear_auth_cache()
    monkeypatch.setattr(limiter, "enabled", False)
    monkeypatch.setattr(supabase_client.SupabaseClient, "get_user_client", classmethod(lambda cls, token: supabase))

    fastapi_app.dependency_overrides[supabase_client.get_supabase] = lambda: supabase
    fastapi_app.dependency_overrides[supabase_client.get_session_supabase] = lambda: supabase
    fastapi_app.dependency_overrides[supabase_client.get_service_supabase] = lambda: service_supabase
    fastapi_app.dependency_overrides[dependencies.get_user_supabase] = lambda: supabase
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_account(supabase):
    user_id, token = supabase.add_account("admin@example.com", full_name="Ada Admin", role_id="admin")
    return {"id": user_id, "token": token, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
def client_account(supabase):
    user_id, token = supabase.add_account("carl@example.com", full_name="Carl Client", role_id="client")
    return {"id": user_id, "token": token, "headers": {"Authorization": f"Bearer {token}"}}
