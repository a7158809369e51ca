"""Error taxonomy shared by the services and routers."""


class ValidationError(ValueError):
    """Missing or malformed caller input (HTTP 400)."""


class AuthenticationError(Exception):
    """No caller identity where one is required (HTTP 401)."""


class PersistenceError(Exception):
    """The database operation itself failed (HTTP 500)."""
