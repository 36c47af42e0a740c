import pytest
from fastapi.testclient import TestClient

from auth.jwt import TokenIssuer
from auth.password import CredentialHasher
from auth.service import AuthService
from config.settings import Settings
from database.store import InMemoryUserStore
from main import create_app

TEST_SECRET = "test-secret-key"


class FakeClock:
    """Callable clock the tests can move forward by hand."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def hasher() -> CredentialHasher:
    # Minimum bcrypt cost keeps the suite fast.
    return CredentialHasher(rounds=4)


@pytest.fixture()
def tokens(clock) -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, clock=clock)


@pytest.fixture()
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture()
def service(store, hasher, tokens) -> AuthService:
    return AuthService(store=store, hasher=hasher, tokens=tokens)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        user_store="memory",
        rate_limit_max_requests=1000,
    )


@pytest.fixture()
def client(settings, store) -> TestClient:
    return TestClient(create_app(settings=settings, store=store))
