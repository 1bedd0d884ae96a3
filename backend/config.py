import os


def _split_origins(value):
    if not value or value.strip() == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Listen on every interface; only the port is configurable
    HOST = '0.0.0.0'
    PORT = int(os.environ.get('PORT', '3000'))
    # Roster size required before the host can start a round
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    CORS_ALLOWED_ORIGINS = _split_origins(os.environ.get('CORS_ALLOWED_ORIGINS', '*'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Front-end bundle served as-is from this folder
    STATIC_FOLDER = os.environ.get('STATIC_FOLDER', 'public')
