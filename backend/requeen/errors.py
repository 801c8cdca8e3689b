"""Typed failures raised by the requeening services."""

from __future__ import annotations

from fastapi import HTTPException

# purpose: stable machine-readable error kinds shared by services and routes
# status: active


class SwarmError(RuntimeError):
    """Base error for requeening orchestration."""

    code = "error"
    status_code = 400

    def as_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": str(self)}

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.as_detail())


class NotFound(SwarmError):
    """Entity is absent or belongs to another operator."""

    code = "not_found"
    status_code = 404


class SiteNotFound(NotFound):
    pass


class SessionNotFound(NotFound):
    pass


class ColonyNotFound(NotFound):
    pass


class HiveNotFound(NotFound):
    pass


class InvalidArgument(SwarmError):
    """Malformed method, out-of-range delay or missing reference."""

    code = "invalid_argument"
    status_code = 400


class InvalidSession(SwarmError):
    """Session exists but no longer accepts work."""

    code = "invalid_session"
    status_code = 400


class InvalidTransition(SwarmError):
    """Colony state machine rule violation."""

    code = "invalid_transition"
    status_code = 409


class NoPendingColonies(InvalidTransition):
    pass


class StatusConflict(InvalidTransition):
    """A concurrent request moved the colony first."""

    code = "conflict"


class AlreadyClosed(SwarmError):
    code = "already_closed"
    status_code = 409


class SessionAlreadyClosed(AlreadyClosed):
    pass


class Conflict(SwarmError):
    code = "conflict"
    status_code = 409


class SessionConflict(Conflict):
    pass


class DuplicateColony(Conflict):
    pass
