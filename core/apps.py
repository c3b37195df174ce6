import logging
from django.apps import AppConfig
from django.db import connection

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
    verbose_name = 'Core (Organization)'

    def ready(self):
        try:
            logger.info('DB=%s', connection.vendor)
        except Exception:
            logger.warning('Could not resolve database vendor at startup', exc_info=True)
