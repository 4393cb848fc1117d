import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Listening address for run.py
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Comma-separated list, or '*' to allow any origin
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Room codes: no 0/O or 1/I so they can be read aloud and typed
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '5'))
    ROOM_CODE_ALPHABET = os.environ.get('ROOM_CODE_ALPHABET', 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789')
    # Display names are trimmed then truncated to this many characters
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '20'))
