"""
Test settings: in-memory SQLite and a fast password hasher.
"""
import os

# base.py resolves the database at import time
os.environ.setdefault('DATABASE_URL', 'sqlite://:memory:')

from .base import *

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
FRONTEND_URL = 'http://testserver'
ASSIGNMENT_STRICT_TRANSITIONS = False
LOGGING['root']['level'] = 'CRITICAL'
for _logger in LOGGING['loggers'].values():
    _logger['level'] = 'CRITICAL'
