import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///bingo.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Shared secret the host sends in X-Host-Key for start/draw/reset/claim
    HOST_KEY = os.environ.get('HOST_KEY') or 'letmein'
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', '12'))
    # Optional: path to a phrase list (one per line). Defaults to the bundled list.
    PHRASES_FILE = os.environ.get('PHRASES_FILE')
    SCORECARD_POOL_TARGET = int(os.environ.get('SCORECARD_POOL_TARGET', '20'))
    MAX_FULL_CARD_WINNERS = int(os.environ.get('MAX_FULL_CARD_WINNERS', '3'))
    PREVIEW_DEFAULT_COUNT = int(os.environ.get('PREVIEW_DEFAULT_COUNT', '6'))
    # Upper bound for ?count= on the public preview endpoint
    MAX_PREVIEW_COUNT = int(os.environ.get('MAX_PREVIEW_COUNT', '20'))
    MAX_DISPLAY_NAME_LENGTH = int(os.environ.get('MAX_DISPLAY_NAME_LENGTH', '40'))
    # Optional: debounce host start/draw actions (ms). 0 disables.
    HOST_DEBOUNCE_MS = int(os.environ.get('HOST_DEBOUNCE_MS', '0'))
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000'
        ).split(',') if o.strip()
    ]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
