"""
Integration tests for the IDL backends: GraphQL, protobuf (gRPC and
Connect), Cap'n Proto, Thrift and Smithy.
"""

import json

import pytest

from servicegen.api.generators import (
    render_capnp,
    render_connect,
    render_graphql,
    render_grpc,
    render_smithy,
    render_thrift,
)
from servicegen.config import get_settings


@pytest.fixture
def users(extract, users_svc):
    return extract(users_svc)


def text_of(render, service):
    [content] = render(service, get_settings()).values()
    return content


def lines_of(render, service):
    return [line.strip() for line in text_of(render, service).splitlines()]


class TestGrpc:
    def test_file_name(self, users):
        assert list(render_grpc(users, get_settings())) == ["user_service.proto"]

    def test_header(self, users):
        lines = lines_of(render_grpc, users)

        assert 'syntax = "proto3";' in lines
        assert "package user_service;" in lines
        assert 'import "google/protobuf/empty.proto";' in lines

    def test_package_option(self, extract):
        service = extract('''
@grpc(package="acme.users.v1")
service S
  def ping(self) -> str
end
''')
        assert "package acme.users.v1;" in lines_of(render_grpc, service)

    def test_rpcs(self, users):
        lines = lines_of(render_grpc, users)

        assert "rpc CreateUser(CreateUserRequest) returns (CreateUserResponse);" in lines
        assert "rpc GetUser(GetUserRequest) returns (GetUserResponse);" in lines
        assert "rpc DeleteUser(DeleteUserRequest) returns (google.protobuf.Empty);" in lines
        assert "rpc Reset(ResetRequest) returns (ResetResponse);" in lines
        assert not any("InternalStats" in line for line in lines)

    def test_messages(self, users):
        text = text_of(render_grpc, users)

        assert "message ListUsersRequest {\n  optional int32 limit = 1;\n}" in text
        assert "message GetUserResponse {\n  optional User value = 1;\n}" in text
        assert "message ListUsersResponse {\n  repeated User items = 1;\n}" in text
        assert "  oneof result {\n    User value = 1;\n    UserError error = 2;\n  }" in text
        assert "message PingRequest {\n}" in text

    def test_record_messages(self, users):
        text = text_of(render_grpc, users)

        assert "// A registered user." in text
        assert "message User {\n  string id = 1;\n  string name = 2;\n  optional string email = 3;\n}" in text

    def test_streaming(self, extract, streaming_svc):
        lines = lines_of(render_grpc, extract(streaming_svc))

        assert "rpc WatchEvents(WatchEventsRequest) returns (stream WatchEventsResponse);" in lines
        assert "map<string, string> payload = 2;" in lines


class TestConnect:
    def test_files(self, users):
        assert list(render_connect(users, get_settings())) == ["user_service.connect.proto", "user_service.connect.json"]

    def test_schema_matches_grpc(self, users):
        proto = render_connect(users, get_settings())["user_service.connect.proto"]
        lines = [line.strip() for line in proto.splitlines()]

        assert lines[0] == "// Connect service definition for UserService"
        assert "package user_service;" in lines
        assert "rpc CreateUser(CreateUserRequest) returns (CreateUserResponse);" in lines
        assert "// POST /user_service.UserService/CreateUser" in lines
        assert "message ListUsersRequest {\n  optional int32 limit = 1;\n}" in proto
        assert "POST /" not in text_of(render_grpc, users)

    def test_package_option(self, extract):
        service = extract('''
@grpc(package="acme.grpc.v1")
@connect(package="chat.v1")
service ChatService
  def send_message(self, message: str) -> str
end
''')
        files = render_connect(service, get_settings())
        manifest = json.loads(files["chat_service.connect.json"])

        assert "package chat.v1;" in files["chat_service.connect.proto"]
        assert manifest["procedures"] == [{
            "name": "SendMessage",
            "path": "/chat.v1.ChatService/SendMessage",
            "request": "SendMessageRequest",
            "response": "SendMessageResponse",
            "streaming": "unary",
        }]

    def test_falls_back_to_grpc_package(self, extract):
        service = extract('''
@grpc(package="acme.grpc.v1")
service S
  def ping(self) -> str
end
''')
        manifest = json.loads(render_connect(service, get_settings())["s.connect.json"])

        assert manifest["package"] == "acme.grpc.v1"
        assert manifest["procedures"][0]["path"] == "/acme.grpc.v1.S/Ping"

    def test_server_streaming(self, extract, streaming_svc):
        files = render_connect(extract(streaming_svc), get_settings())
        procedures = {p["name"]: p for p in json.loads(files["event_service.connect.json"])["procedures"]}

        assert procedures["WatchEvents"]["streaming"] == "server"
        assert procedures["ListEvents"]["streaming"] == "unary"
        assert "returns (stream WatchEventsResponse);" in files["event_service.connect.proto"]


class TestGraphQL:
    def test_roots(self, users):
        text = text_of(render_graphql, users)

        assert "schema {\n  query: Query\n  mutation: Mutation\n}" in text
        assert "subscription" not in text

    def test_fields(self, users):
        lines = lines_of(render_graphql, users)

        assert "getUser(id: String!): User" in lines
        assert "listUsers(limit: Int): [User!]!" in lines
        assert "createUser(name: String!, email: String!): User!" in lines
        assert "deleteUser(id: String!): Boolean" in lines
        assert "ping: String!" in lines
        assert "reset: Int!" in lines

    def test_query_and_mutation_split(self, users):
        text = text_of(render_graphql, users)
        query = text[text.index("type Query {"):text.index("type Mutation {")]

        assert "getUser" in query
        assert "createUser" not in query

    def test_types(self, users):
        text = text_of(render_graphql, users)

        assert "type User {" in text
        assert "  email: String\n" in text
        assert "UserError" not in text
        assert "input " not in text

    def test_input_types_and_json(self, extract):
        service = extract('''
record Filter
  tags: List[str]
  extra: Dict[str, str]
end
service S
  def find_users(self, filter: Filter) -> List[str]
end
''')
        text = text_of(render_graphql, service)

        assert "findUsers(filter: FilterInput!): [String!]!" in text
        assert "input FilterInput {\n  tags: [String!]!\n  extra: JSON!\n}" in text
        assert "scalar JSON" in text

    def test_subscription(self, extract, streaming_svc):
        text = text_of(render_graphql, extract(streaming_svc))

        assert "type Subscription {" in text
        assert "watchEvents(kind: String!): Event!" in text

    def test_query_root_is_never_empty(self, extract):
        service = extract('''
service S
  def ping(self) -> str
end
''')
        assert "type Query {\n  _service: String!\n}" in text_of(render_graphql, service)


class TestCapnp:
    def test_methods_are_numbered(self, users):
        lines = lines_of(render_capnp, users)

        assert "createUser @0 (name :Text, email :Text) -> (value :User, error :UserError);" in lines
        assert "getUser @1 (id :Text) -> (value :User);" in lines
        assert "listUsers @2 (limit :Int32) -> (items :List(User));" in lines
        assert "deleteUser @3 (id :Text) -> ();" in lines
        assert "ping @4 () -> (value :Text);" in lines
        assert "reset @5 () -> (value :Int64);" in lines

    def test_structs(self, users):
        text = text_of(render_capnp, users)

        assert "struct User {\n  id @0 :Text;\n  name @1 :Text;\n  email @2 :Text;\n}" in text

    def test_file_id_is_stable(self, users):
        first = lines_of(render_capnp, users)
        second = lines_of(render_capnp, users)
        [file_id] = [line for line in first if line.startswith("@0x")]

        assert file_id in second
        assert len(file_id) == len("@0x") + 16 + 1


class TestThrift:
    def test_namespace(self, users):
        assert "namespace py user_service" in lines_of(render_thrift, users)

    def test_functions(self, users):
        lines = lines_of(render_thrift, users)

        assert (
            "User create_user(1: required string name, 2: required string email) "
            "throws (1: CreateUserError failure),"
        ) in lines
        assert "list<User> list_users(1: optional i32 limit)," in lines
        assert "void delete_user(1: required string id)," in lines
        assert "i64 reset()," in lines

    def test_exceptions_and_structs(self, users):
        text = text_of(render_thrift, users)

        assert "exception CreateUserError {\n  1: required UserError error,\n}" in text
        assert "  3: optional string email,\n" in text


class TestSmithy:
    def test_service(self, users):
        text = text_of(render_smithy, users)

        assert "namespace com.example" in text
        assert 'version: "1.0.0"' in text
        assert "operations: [\n        CreateUser\n        GetUser\n" in text

    def test_namespace_option(self, extract):
        service = extract('''
@smithy(namespace="io.acme")
service S
  def ping(self) -> str
end
''')
        assert "namespace io.acme" in text_of(render_smithy, service)

    def test_operations(self, users):
        text = text_of(render_smithy, users)

        assert "operation CreateUser {" in text
        assert "    errors: [CreateUserError]" in text
        assert '@error("client")\nstructure CreateUserError {' in text

    def test_collections(self, users):
        text = text_of(render_smithy, users)

        assert "        @required\n        items: UserList" in text
        assert "list UserList {\n    member: User\n}" in text

    def test_optional_members(self, users):
        text = text_of(render_smithy, users)
        user = text[text.index("structure User {"):]

        assert "    @required\n    id: String" in user
        assert "    email: String" in user
        assert "@required\n    email" not in user
