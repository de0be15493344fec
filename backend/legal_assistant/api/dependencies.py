from fastapi import HTTPException
from starlette.requests import HTTPConnection

from legal_assistant.services.container import Services


def get_services(connection: HTTPConnection) -> Services:
    """
    Dependency returning the shared services built at start-up.

    Tests override this via FastAPI's dependency_overrides to inject in-memory stores
    and a stub completion provider.
    """
    return connection.app.state.services


def read_user_email(connection: HTTPConnection) -> str:
    """Lowercased X-User-Email header, or ?user= for WebSocket clients that cannot set handshake headers."""
    email = connection.headers.get("X-User-Email") or connection.query_params.get("user") or ""
    return email.strip().lower()


def get_user_email(connection: HTTPConnection) -> str:
    """Identity of the acting user. Authentication itself happens upstream."""
    email = read_user_email(connection)
    if not email:
        raise HTTPException(status_code=401, detail="Missing user identity")
    return email
