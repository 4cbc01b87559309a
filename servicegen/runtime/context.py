"""
Protocol-agnostic request context.

Generated routers and dispatchers inject a Context into any method that
declares one instead of reading it from the caller's arguments:

    def create_user(self, ctx: servicegen.Context, name: str) -> User
        ctx.request_id       # from the x-request-id header
        ctx.header("authorization")

Different transports populate it differently:
    - HTTP / WebSocket: every request header, request id from x-request-id
    - CLI: environment variables, readable through env()
    - JSON-RPC / MCP: whatever metadata the transport wrapper passes in
"""

import os
import uuid
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

REQUEST_ID_HEADER = "x-request-id"
USER_ID_HEADER = "x-user-id"
ENV_PREFIX = "env:"


@dataclass
class Context:
    metadata: Dict[str, str] = field(default_factory=dict)
    user_id: Optional[str] = None
    request_id: Optional[str] = None

    def get(self, key: str) -> Optional[str]:
        return self.metadata.get(key)

    def set(self, key: str, value: str) -> None:
        self.metadata[key] = value

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.metadata.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def authorization(self) -> Optional[str]:
        return self.header("authorization")

    @property
    def content_type(self) -> Optional[str]:
        return self.header("content-type")

    def env(self, name: str) -> Optional[str]:
        return self.get(f"{ENV_PREFIX}{name}")

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "Context":
        metadata = {str(k): str(v) for k, v in headers.items()}
        ctx = cls(metadata=metadata)
        ctx.request_id = ctx.header(REQUEST_ID_HEADER) or uuid.uuid4().hex
        ctx.user_id = ctx.header(USER_ID_HEADER)
        return ctx

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "Context":
        environ = os.environ if environ is None else environ
        metadata = {f"{ENV_PREFIX}{k}": v for k, v in environ.items()}
        return cls(metadata=metadata, request_id=uuid.uuid4().hex)
