"""Error taxonomy for room commands.

Two families: ``UserFacingError`` is reported back to the offending
connection as an ``errorMessage`` event, while ``IgnoredCommand`` is
swallowed by the socket layer and only logged. Stale client UI (a
non-host clicking start, a late button press) lands in the second
family, so nothing about room state leaks to the sender.
"""


class BuzzerError(Exception):
    """Base class for every error raised by the room services."""


class UserFacingError(BuzzerError):
    message = 'Something went wrong.'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidName(UserFacingError):
    message = 'You must enter your name.'


class RoomNotFound(UserFacingError):
    message = 'The room does not exist.'


class IgnoredCommand(BuzzerError):
    pass


class Unauthorized(IgnoredCommand):
    """A non-host tried a host-only action."""


class NoActiveRoom(IgnoredCommand):
    """The connection is not bound to a live room."""


class InvalidTransition(IgnoredCommand):
    """The command does not apply to the room's current status."""


class NoRoomsAvailable(UserFacingError):
    """Every room code is in use."""
    message = 'No rooms are available right now. Try again later.'
