"""
Unit tests for the extraction pipeline.

Covers the end-to-end scenarios of a description block turning into a
ServiceDescriptor: operation kinds, paths, roles, shapes, duplicate routes
and block-wide context resolution.
"""

import pytest

from servicegen.api.pipeline import extract_services
from servicegen.errors import ContextCollision, DuplicateRouteConflict, GenerationFailed
from servicegen.language import build_model_str
from servicegen.lib.descriptors import OperationKind, Role, ShapeKind, Visibility


class TestScenarios:
    """The canonical create / lookup / list / conflict / context scenarios."""

    def test_creation_with_outcome(self, extract):
        """create_user is a POST creation whose parameters form the body."""
        service = extract('''
record User
  id: str
end
record UserError
  message: str
end
service Users
  def create_user(self, name: str, email: str) -> Result[User, UserError]
end
''')
        method = service.get_method("create_user")
        op = service.get_operation("create_user")

        assert op.kind == OperationKind.CREATION
        assert op.verb == "POST"
        assert op.path == "/users"
        assert op.status_code == 201
        assert [p.role for p in method.params] == [Role.STRUCTURED_BODY, Role.STRUCTURED_BODY]
        assert method.return_shape.kind == ShapeKind.OUTCOME_SUM
        assert method.return_shape.value_type.name == "User"
        assert method.return_shape.error_type.name == "UserError"

    def test_lookup_with_identifier(self, extract):
        """get_user(id) binds id into the path."""
        service = extract('''
service Users
  def get_user(self, id: str) -> Optional[User]
end
''')
        method = service.get_method("get_user")
        op = service.get_operation("get_user")

        assert op.kind == OperationKind.LOOKUP
        assert op.verb == "GET"
        assert op.path == "/users/{id}"
        assert method.params[0].role == Role.PATH_IDENTIFIER
        assert method.return_shape.kind == ShapeKind.OPTIONAL_VALUE

    def test_collection_query_with_optional_limit(self, extract):
        service = extract('''
service Users
  def list_users(self, limit: Optional[i32]) -> List[User]
end
''')
        method = service.get_method("list_users")
        op = service.get_operation("list_users")
        limit = method.params[0]

        assert op.kind == OperationKind.COLLECTION_QUERY
        assert op.path == "/users"
        assert limit.role == Role.QUERY_VALUE
        assert limit.is_optional
        assert not limit.is_required
        assert method.return_shape.kind == ShapeKind.SEQUENCE

    def test_duplicate_route_names_both_methods(self, extract_errors):
        """get_item and fetch_item both resolve to GET /items/{id}."""
        errors = extract_errors('''
service Items
  def get_item(self, id: str) -> Optional[Item]
  def fetch_item(self, id: str) -> Optional[Item]
end
''')
        conflicts = [e for e in errors if isinstance(e, DuplicateRouteConflict)]

        assert len(conflicts) == 1
        assert conflicts[0].methods == ("get_item", "fetch_item")
        assert "GET /items/{id}" in conflicts[0].message

    def test_qualified_context_disables_bare_injection(self, extract):
        """A qualified Context anywhere in the block makes bare Context a user type."""
        service = extract('''
service Chat
  def handler(self, ctx: Context, message: str) -> str
  def api_call(self, ctx: servicegen.Context) -> str
end
''')
        handler = service.get_method("handler")
        api_call = service.get_method("api_call")

        assert service.has_qualified_context
        assert handler.params[0].role == Role.STRUCTURED_BODY
        assert handler.context_param is None
        assert api_call.params[0].role == Role.AMBIENT_CONTEXT
        assert api_call.caller_params == ()


class TestPipelineProperties:
    """Properties that hold for any block."""

    def test_extraction_is_deterministic(self, users_svc):
        first = extract_services(build_model_str(users_svc))
        second = extract_services(build_model_str(users_svc))

        assert first == second

    def test_prefix_kind_independent_of_unrelated_overrides(self, extract):
        plain = extract('''
service S
  def get_thing(self, id: str) -> Thing
  def ping(self) -> str
end
''')
        overridden = extract('''
service S
  def get_thing(self, id: str) -> Thing
  @route(verb="GET", path="/health")
  def ping(self) -> str
end
''')
        assert plain.get_operation("get_thing") == overridden.get_operation("get_thing")

    def test_bare_context_injected_without_qualified_spelling(self, extract):
        service = extract('''
service S
  async def ping(self, ctx: Context) -> str
end
''')
        method = service.get_method("ping")

        assert not service.has_qualified_context
        assert method.context_param.name == "ctx"
        assert method.is_asynchronous

    def test_every_error_of_a_block_is_reported(self, extract_errors):
        errors = extract_errors('''
service S
  def broken(self, *args) -> str
  @route(path="no-slash")
  def other(self) -> str
  @http(prefix="/x")
  def third(self) -> str
end
''')
        kinds = sorted(e.kind for e in errors)

        assert kinds == ["InvalidSignature", "MalformedPathTemplate", "UnknownOverrideKey"]

    def test_failure_names_the_block(self):
        with pytest.raises(GenerationFailed) as info:
            extract_services(build_model_str('''
service Broken
  def get_a(self, id: str) -> A
  def read_a(self, id: str) -> A
end
'''))
        assert info.value.block == "Broken"
        assert "Broken" in str(info.value)
        assert info.value.kinds == ["DuplicateRouteConflict"]

    def test_two_context_parameters_collide(self, extract_errors):
        errors = extract_errors('''
service S
  def ping(self, a: Context, b: Context) -> str
end
''')
        assert [type(e) for e in errors] == [ContextCollision]

    def test_users_service_operations(self, extract, users_svc):
        service = extract(users_svc)
        ops = {op.method_name: op for op in service.operations}

        assert ops["create_user"].path == "/api/users"
        assert ops["get_user"].path == "/api/users/{id}"
        assert ops["delete_user"].verb == "DELETE"
        assert ops["delete_user"].status_code == 204
        assert ops["ping"].path == "/api/rpc/ping"
        assert ops["reset"].visibility == Visibility.HIDDEN
        assert ops["internal_stats"].is_suppressed
        assert [m.name for m, _ in service.exposed()] == [
            "create_user", "get_user", "list_users", "delete_user", "ping", "reset",
        ]
        assert [m.name for m, _ in service.documented()] == [
            "create_user", "get_user", "list_users", "delete_user", "ping",
        ]

    def test_private_and_static_methods_are_skipped(self, extract):
        service = extract('''
service S
  def _helper(self) -> str
  def build() -> str
  def ping(self) -> str
end
''')
        assert [m.name for m in service.methods] == ["ping"]
