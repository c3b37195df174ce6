"""
Development settings
"""
from .base import *

DEBUG = True

ALLOWED_HOSTS = ['*']

# Notification mail goes to the console
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Surface the service logs while developing
for _logger in LOGGING['loggers'].values():
    if _logger is not LOGGING['loggers']['django']:
        _logger['level'] = env('LOG_LEVEL', default='DEBUG')
