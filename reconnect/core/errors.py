"""
Repository Errors

Failures raised by the session repository. Engines never raise for missing
data; only these surface to callers.
"""

# PostgreSQL SQLSTATE for infinite recursion detected in a row-level policy
POLICY_RECURSION_CODE = "42P17"

POLICY_RECURSION_MESSAGE = (
    "Database policy recursion detected. Please apply the admin policy fix."
)


class RepositoryError(RuntimeError):
    """The session repository is unavailable or misconfigured."""

    def __init__(self, message: str, code: str = ""):
        super().__init__(message)
        self.code = code


class PolicyRecursionError(RepositoryError):
    """Access-control misconfiguration the operator must fix."""

    def __init__(self, message: str = POLICY_RECURSION_MESSAGE):
        super().__init__(message, code=POLICY_RECURSION_CODE)


class SessionStateError(RepositoryError):
    """A session write that violates the completion lifecycle."""
