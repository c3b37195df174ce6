"""
Production settings
"""
from django.core.exceptions import ImproperlyConfigured

from .base import *

DEBUG = False

if SECRET_KEY.startswith('django-insecure'):
    raise ImproperlyConfigured('DJANGO_SECRET_KEY must be set in production.')

# Tokens must not be signed with the development key
if SIMPLE_JWT['SIGNING_KEY'] == 'django-insecure-dev-key-change-in-production':
    raise ImproperlyConfigured('JWT_SIGNING_KEY or DJANGO_SECRET_KEY must be set in production.')

SECURE_SSL_REDIRECT = env.bool('SECURE_SSL_REDIRECT', default=True)
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_HSTS_SECONDS = env.int('SECURE_HSTS_SECONDS', default=3600)
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

if not DATABASES['default'].get('CONN_MAX_AGE'):
    DATABASES['default']['CONN_MAX_AGE'] = 60

# Notification mail must leave the box in production
if EMAIL_BACKEND.endswith('console.EmailBackend'):
    raise ImproperlyConfigured('EMAIL_URL must point at a real mail server in production.')

# Browsable API off; JSON only
REST_FRAMEWORK['DEFAULT_RENDERER_CLASSES'] = ('rest_framework.renderers.JSONRenderer',)
