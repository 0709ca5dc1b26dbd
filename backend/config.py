import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Listen address for run.py
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3001'))
    DEBUG = os.environ.get('DEBUG', '').lower() in ('1', 'true', 'yes')
    # Comma-separated list; '*' allows any origin
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Minimum registered players before a round may start
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    STARTING_HEALTH = int(os.environ.get('STARTING_HEALTH', '10'))
    # Delay between the last choice and the result broadcast (ms). 0 resolves immediately.
    RESOLVE_DELAY_MS = int(os.environ.get('RESOLVE_DELAY_MS', '500'))
    # Under TESTING, resolutions run inline unless this is set.
    ENABLE_SCHEDULER_IN_TESTS = False
