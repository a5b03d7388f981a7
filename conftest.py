import os

TEST_DATABASE_FILE = "test_ticketing.db"
TEST_DATABASE_URL = f"sqlite:///./{TEST_DATABASE_FILE}"

os.environ.setdefault("ENVIRONTMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# a configured postgres (DATABASE_URL or POSTGRES_HOST) is used as is
if not os.environ.get("DATABASE_URL") and not os.environ.get("POSTGRES_HOST"):
    os.environ["DATABASE_URL"] = TEST_DATABASE_URL


def pytest_sessionstart(session):
    if os.environ.get("DATABASE_URL") == TEST_DATABASE_URL:
        for suffix in ("", "-journal", "-wal"):
            if os.path.exists(TEST_DATABASE_FILE + suffix):
                os.remove(TEST_DATABASE_FILE + suffix)
