import contextvars
from contextlib import contextmanager
import uuid

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
breakdown_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("breakdown_id", default=None)
episode_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("episode_id", default=None)


def set_request_id(request_id: str) -> contextvars.Token:
    """Store the current request ID in a context variable."""
    return request_id_var.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    """Reset the request ID context variable to a previous state."""
    request_id_var.reset(token)


def get_request_id() -> str | None:
    """Retrieve the current request ID from the context."""
    return request_id_var.get()


def _normalize_id(value: uuid.UUID | int | str | None) -> str | None:
    if value is None:
        return None
    return str(value)


def get_breakdown_id() -> str | None:
    """Retrieve the current pending breakdown ID for logging."""
    return breakdown_id_var.get()


def get_episode_id() -> str | None:
    """Retrieve the current episode ID for logging."""
    return episode_id_var.get()


@contextmanager
def log_context(
    breakdown_id: uuid.UUID | str | None = None,
    episode_id: int | str | None = None,
):
    """Temporarily scope breakdown/episode context for structured logs."""
    tokens: list[tuple[contextvars.ContextVar[str | None], contextvars.Token]] = []
    if breakdown_id is not None:
        tokens.append((breakdown_id_var, breakdown_id_var.set(_normalize_id(breakdown_id))))
    if episode_id is not None:
        tokens.append((episode_id_var, episode_id_var.set(_normalize_id(episode_id))))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
