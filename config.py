import os


def _split_origins(raw):
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Fallback for local dev when no port is provided by the host
    PORT = int(os.environ.get('PORT', '4000'))
    CORS_ORIGINS = _split_origins(os.environ.get(
        'CORS_ORIGINS',
        'https://jeopardy-sami.vercel.app,http://localhost:5173,http://127.0.0.1:5173',
    ))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Used when createRoom / updateRoomLimit carry no usable player limit
    DEFAULT_ROOM_CAPACITY = int(os.environ.get('DEFAULT_ROOM_CAPACITY', '2'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
