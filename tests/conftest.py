"""
Pytest configuration and shared fixtures for the servicegen test suite.
"""

import importlib.util
import shutil
import sys
import tempfile
import uuid
from pathlib import Path

import pytest

from servicegen.api.pipeline import extract_services
from servicegen.errors import GenerationFailed
from servicegen.language import build_model, build_model_str, get_metamodel


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def examples_dir(project_root):
    """Return the examples directory."""
    return project_root / "examples"


@pytest.fixture
def temp_output_dir():
    """Create a temporary directory for generated output."""
    temp_dir = tempfile.mkdtemp(prefix="svcgen_test_")
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(scope="session")
def svc_metamodel():
    """Return the description-language metamodel (cached for session)."""
    return get_metamodel()


@pytest.fixture
def write_svc_file(temp_output_dir):
    """Factory fixture to write a service description to a temporary file."""
    def _write(content: str, filename: str = "test.svc") -> Path:
        file_path = temp_output_dir / filename
        file_path.write_text(content)
        return file_path
    return _write


@pytest.fixture
def build_svc_model(write_svc_file):
    """Factory fixture to build a model from description text via a file."""
    def _build(content: str):
        return build_model(str(write_svc_file(content)))
    return _build


@pytest.fixture
def extract():
    """Factory fixture: description text -> first ServiceDescriptor."""
    def _extract(content: str):
        return extract_services(build_model_str(content))[0]
    return _extract


@pytest.fixture
def extract_errors():
    """Factory fixture: description text -> list of diagnostics it fails with."""
    def _extract_errors(content: str):
        with pytest.raises(GenerationFailed) as info:
            extract_services(build_model_str(content))
        return info.value.errors
    return _extract_errors


@pytest.fixture
def load_generated(temp_output_dir):
    """Factory fixture: write generated Python source to disk and import it."""
    loaded = []

    def _load(source: str, stem: str = "generated"):
        name = f"{stem}_{uuid.uuid4().hex[:8]}"
        path = temp_output_dir / f"{name}.py"
        path.write_text(source)
        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        loaded.append(name)
        spec.loader.exec_module(module)
        return module

    yield _load
    for name in loaded:
        sys.modules.pop(name, None)


# Test data fixtures for common scenarios

@pytest.fixture
def users_svc():
    """A user-management service exercising every return shape but streaming."""
    return '''
record User
  """A registered user."""
  id: str
  name: str
  email: Optional[str]
end

record UserError
  code: str
  message: str
end

@http(prefix="/api")
@cli(name="users", version="2.0.0", about="Manage users")
service UserService
  """Manages users."""

  def create_user(self, name: str, email: str) -> Result[User, UserError]
    """Create a new user."""

  def get_user(self, id: str) -> Optional[User]
    """Fetch one user.

    Returns nothing when the user does not exist.
    """

  def list_users(self, limit: Optional[i32]) -> List[User]
    """List users."""

  def delete_user(self, id: str)
    """Remove a user."""

  async def ping(self, ctx: Context) -> str
    """Health check."""

  @route(visibility="hidden")
  def reset(self) -> int

  @route(visibility="suppressed")
  def internal_stats(self) -> Dict[str, i64]
end
'''


@pytest.fixture
def streaming_svc():
    """A service with one lazily produced result."""
    return '''
record Event
  kind: str
  payload: Dict[str, str]
end

service EventService
  def list_events(self, kind: Optional[str]) -> List[Event]

  def watch_events(self, kind: str) -> Iterator[Event]
    """Follow new events."""
end
'''


class InMemoryUsers:
    """Reference implementation of UserService used by generated-code tests."""

    def __init__(self):
        self.users = {}
        self.counter = 0
        self.seen_context = None

    def create_user(self, name, email):
        from servicegen import Failure, Success

        if "@" not in email:
            return Failure({"code": "invalid_email", "message": f"bad email: {email}"})
        self.counter += 1
        user = {"id": str(self.counter), "name": name, "email": email}
        self.users[user["id"]] = user
        return Success(user)

    def get_user(self, id):
        return self.users.get(id)

    def list_users(self, limit=None):
        users = list(self.users.values())
        return users if limit is None else users[:limit]

    def delete_user(self, id):
        self.users.pop(id, None)

    async def ping(self, ctx):
        self.seen_context = ctx
        return "pong"

    def reset(self):
        count = len(self.users)
        self.users.clear()
        return count

    def internal_stats(self):
        return {"users": len(self.users)}


@pytest.fixture
def users_impl():
    return InMemoryUsers()
