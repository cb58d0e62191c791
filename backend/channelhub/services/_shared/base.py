from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from channelhub.core import errors as api_errors
from channelhub.services._shared.errors import (
    ConflictError,
    InvalidRequestError,
    MediaUploadError,
    NotFoundError,
    ServiceError,
    TokenIssueError,
    UnauthorizedError,
    UnknownAccountError,
    ValidationFailedError,
)
from channelhub.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

# First match wins. UnknownAccountError subclasses NotFoundError but a failed
# login must look like any other authentication failure.
_HTTP_EQUIVALENTS: tuple[tuple[tuple[type[ServiceError], ...], type[api_errors.APIError]], ...] = (
    ((UnknownAccountError, UnauthorizedError), api_errors.Unauthorized),
    ((NotFoundError,), api_errors.NotFound),
    ((ConflictError,), api_errors.Conflict),
    ((MediaUploadError, TokenIssueError), api_errors.InternalError),
    ((ValidationFailedError, InvalidRequestError, ServiceError), api_errors.BadRequest),
)


@dataclass(slots=True)
class ServiceContext:
    """
    Request-scoped data handed to a service.

    :param actor_id: Authenticated account id, ``None`` when anonymous.
    :param request_id: Correlation id attached to emitted log events.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Common plumbing for application services.

    Services open a Unit of Work per use-case through :meth:`rw_uow` /
    :meth:`ro_uow` and never reach for the global session. The caller's
    identity arrives through ``ctx``; services stay free of Flask imports.
    """

    read_isolation = "READ COMMITTED"
    log = logging.getLogger("channelhub.services")

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, isolation: str | None = None) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Read-only Unit of Work.

        :param isolation: Isolation level override; defaults to
            :attr:`read_isolation`.
        """
        return SQLAlchemyReadOnlyUnitOfWork(isolation_level=isolation or self.read_isolation)

    def require_actor(self) -> int:
        """:raises UnauthorizedError: When no account is attached to ``ctx``."""
        if self.ctx.actor_id is None:
            raise UnauthorizedError()
        return int(self.ctx.actor_id)

    def emit(self, event: str, level: int = logging.INFO, **extra: Any) -> None:
        """Log ``event`` as a structured record tagged with the actor."""
        extra.setdefault("account_id", self.ctx.actor_id)
        if self.ctx.request_id:
            extra.setdefault("request_id", self.ctx.request_id)
        self.log.log(level, event, extra={"event": event, **extra})

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        HTTP-level counterpart of a service error.

        :param exc: Anything raised by a service.
        :returns: An :class:`~channelhub.core.errors.APIError` for service
            errors, ``exc`` itself otherwise.
        """
        for domain_types, api_type in _HTTP_EQUIVALENTS:
            if isinstance(exc, domain_types):
                return api_type(str(exc))
        return exc
