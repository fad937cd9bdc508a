class RoomError(Exception):
    """Base class for errors reported back to the requesting client."""

    message = 'Room error'

    def __init__(self, code=None):
        super().__init__(self.message)
        self.code = code

    def to_dict(self):
        return {'error': self.message}


class RoomNotFound(RoomError):
    message = 'Room not found'


class RoomFull(RoomError):
    message = 'Room is full'
