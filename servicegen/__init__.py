"""
servicegen - service model extraction and multi-backend generation.

`servicegen.Context` is the fully-qualified ambient context type that
service descriptions may declare on their methods.
"""

from servicegen.runtime import Context, ErrorCode, Failure, Success

__version__ = "0.1.0"

__all__ = ["Context", "ErrorCode", "Failure", "Success", "__version__"]
