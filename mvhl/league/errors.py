"""
Error taxonomy for league operations.

Every error carries a stable machine-readable code and a message that can be
shown to a user as-is. The API layer maps ``http_status`` onto the response.
"""

from typing import Optional


class LeagueError(Exception):
    """Base class for all rejected league operations."""

    code = 'league_error'
    default_message = 'The request could not be completed'
    http_status = 400

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'code': self.code, 'message': self.message}


class NotFoundError(LeagueError):
    code = 'not_found'
    default_message = 'The requested item does not exist'
    http_status = 404


class InvalidStateError(LeagueError):
    code = 'invalid_state'
    default_message = 'This action is not allowed right now'
    http_status = 409


class NotYourTurnError(LeagueError):
    code = 'not_your_turn'
    default_message = 'It is not your turn to pick'
    http_status = 409


class AlreadyDraftedError(LeagueError):
    code = 'already_drafted'
    default_message = 'This prospect has already been drafted'
    http_status = 409


class InvalidOwnershipError(LeagueError):
    code = 'invalid_ownership'
    default_message = 'One or more players are not on the expected roster'
    http_status = 422


class OwnershipConflictError(LeagueError):
    code = 'ownership_conflict'
    default_message = 'The roster changed while this request was being processed'
    http_status = 409


class StaleTradeError(OwnershipConflictError):
    code = 'stale_trade'
    default_message = 'This trade is no longer valid - rosters have changed'


class WindowClosedError(LeagueError):
    code = 'window_closed'
    default_message = 'This player is not currently on waivers'
    http_status = 409


class NotPermittedError(LeagueError):
    code = 'not_permitted'
    default_message = 'Your team is not allowed to perform this action'
    http_status = 403
