"""
Shared test fixtures for the Employee Directory backend tests.
"""
import os
import sys
import json
import shutil
import pytest

# ── Python path setup ──────────────────────────────────────────────────────────
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

# ── Demo data source ───────────────────────────────────────────────────────────
_DEMO_DATA_PATH = os.path.join(_BACKEND_DIR, "data", "employees.json")


# ── Stores ─────────────────────────────────────────────────────────────────────

class FailingStore:
    """Key-value store whose writes always fail, like a read-only state file."""

    def __init__(self, initial=None):
        self.data = dict(initial or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        raise OSError("state file is read-only")

    def remove(self, key):
        raise OSError("state file is read-only")


# ── Record factories ───────────────────────────────────────────────────────────

def make_employee(name, salary=50000, age=30, emp_type="Individual", email=None,
                  created="2024-01-01T00:00:00Z", updated="2024-01-01T00:00:00Z", **extra):
    """Build an employee record; pass age=None to leave the age out entirely."""
    record = {
        "id": extra.pop("id", name.lower().replace(" ", "-")),
        "employee_name": name,
        "employee_salary": salary,
        "employeeType": emp_type,
        "email": email if email is not None else f"{name.lower().replace(' ', '.')}@example.com",
        "createdAt": created,
        "updatedAt": updated,
    }
    if age is not None:
        record["employee_age"] = age
    record.update(extra)
    return record


@pytest.fixture
def employees():
    """A small, mixed collection covering ties, missing ages and both types."""
    return [
        make_employee("Bob", salary=60000, age=41, emp_type="Company", created="2024-06-10T09:00:00Z"),
        make_employee("Alice", salary=50000, age=34, created="2024-06-10T09:00:00Z"),
        make_employee("Charlie", salary=40000, age=None, emp_type="Company", created="2024-06-10T09:00:00Z"),
        make_employee("David", salary=50000, age=28, created="2024-06-10T09:00:00Z"),
        make_employee("Eve", salary=70000, age=None, emp_type="Company", created="2024-07-15T09:30:00Z"),
    ]


@pytest.fixture
def data_path(tmp_path):
    """Function-scoped copy of the demo data file."""
    dst = tmp_path / "employees.json"
    shutil.copyfile(_DEMO_DATA_PATH, str(dst))
    return str(dst)


@pytest.fixture
def demo_employees():
    with open(_DEMO_DATA_PATH, encoding="utf-8") as f:
        return json.load(f)["employees"]


@pytest.fixture
def state_path(tmp_path):
    return str(tmp_path / "state" / "state.json")


@pytest.fixture
def patched_paths(data_path, state_path):
    """Point api.main at the temp data/state files and start from a fresh controller."""
    import api.main as main_module
    from api.dependencies import reset_controller
    original = (main_module.DATA_PATH, main_module.STATE_PATH, main_module.SEARCH_DELAY)
    main_module.DATA_PATH = data_path
    main_module.STATE_PATH = state_path
    main_module.SEARCH_DELAY = 0.0
    reset_controller()
    yield data_path, state_path
    main_module.DATA_PATH, main_module.STATE_PATH, main_module.SEARCH_DELAY = original
    reset_controller()


@pytest.fixture
def app(patched_paths):
    """Return the FastAPI app pointed at the test data."""
    from api.main import app as _app
    return _app


@pytest.fixture
def client(app):
    """Function-scoped sync TestClient with fresh data and state files."""
    from starlette.testclient import TestClient
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def broken_client(tmp_path, state_path):
    """TestClient whose data file does not exist, so the fetch fails."""
    from starlette.testclient import TestClient
    import api.main as main_module
    from api.dependencies import reset_controller
    original = (main_module.DATA_PATH, main_module.STATE_PATH, main_module.SEARCH_DELAY)
    main_module.DATA_PATH = str(tmp_path / "missing.json")
    main_module.STATE_PATH = state_path
    reset_controller()
    with TestClient(main_module.app, raise_server_exceptions=False) as c:
        yield c
    main_module.DATA_PATH, main_module.STATE_PATH, main_module.SEARCH_DELAY = original
    reset_controller()
