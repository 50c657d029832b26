import pytest

from axis.vault import CredentialResolver, CredentialStore, ENV_VARS


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "vault" / "credentials.db"


@pytest.fixture
def store(db_path):
    return CredentialStore(db_path)


@pytest.fixture
def environ():
    """Isolated environment mapping - never the real os.environ."""
    return {}


@pytest.fixture
def resolver(store, environ):
    return CredentialResolver(store=store, environ=environ)


@pytest.fixture
def clean_axis_env(monkeypatch):
    """Strip AXIS_* credentials from the process environment."""
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def page_repo(tmp_path):
    """
    A project laid out like a typical page object repo:

        proj/
          pages/
            cart.page
            login/
              login.page
            checkout/
              steps/
                payment.page
          README.md
    """
    proj = tmp_path / "proj"
    pages = proj / "pages"
    (pages / "login").mkdir(parents=True)
    (pages / "checkout" / "steps").mkdir(parents=True)
    (pages / "cart.page").write_text("cart")
    (pages / "login" / "login.page").write_text("login")
    (pages / "checkout" / "steps" / "payment.page").write_text("pay")
    (proj / "README.md").write_text("readme")
    return proj
