# servicegen/config.py
from typing import List

from pydantic_settings import BaseSettings


class GeneratorSettings(BaseSettings):
    # Fully-qualified spelling of the ambient context type
    CONTEXT_TYPE: str = "servicegen.Context"

    # Generation defaults
    OUTPUT_DIR: str = "generated"
    DEFAULT_TARGETS: List[str] = ["http", "openapi", "mcp", "cli", "markdown"]
    LOG_LEVEL: str = "INFO"

    # Document metadata
    API_VERSION: str = "1.0.0"
    OPENAPI_VERSION: str = "3.0.3"
    OPENRPC_VERSION: str = "1.2.6"
    ASYNCAPI_VERSION: str = "2.6.0"
    SERVER_URL: str = "http://localhost:8080"

    # IDL defaults
    PROTO_PACKAGE: str = ""
    SMITHY_NAMESPACE: str = "com.example"

    class Config:
        env_prefix = "SVCGEN_"
        env_file = ".env"
        extra = "ignore"


settings = GeneratorSettings()


def get_settings() -> GeneratorSettings:
    return settings
