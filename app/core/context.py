"""Request-scoped authentication context."""

from app.core.errors import Unauthenticated
from app.schemas.auth import Claims


class RequestContext:
    """
    Carries the authenticated claims for one request down to the handler.

    Accessors raise Unauthenticated when no claims were attached, so a
    handler wired without the gate fails loudly instead of seeing no roles.
    """

    def __init__(self, claims: Claims | None = None) -> None:
        self._claims = claims

    @property
    def is_authenticated(self) -> bool:
        return self._claims is not None

    @property
    def claims(self) -> Claims:
        if self._claims is None:
            raise Unauthenticated("no authenticated claims in request context")
        return self._claims

    @property
    def subject(self) -> str:
        return self.claims.subject

    @property
    def roles(self) -> frozenset[str]:
        return self.claims.roles
