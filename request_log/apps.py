from django.apps import AppConfig
from django.core.signals import setting_changed
import logging

logger = logging.getLogger(__name__)


def _reload_on_change(setting, **kwargs):
    if setting == 'REQUEST_LOG':
        from request_log.pipeline import get_pipeline
        get_pipeline().on_configuration_read()


class RequestLogConfig(AppConfig):
    name = 'request_log'
    verbose_name = 'Request log'

    def ready(self):
        """Load the mask rules once the settings are read; reload when they change."""
        from request_log.pipeline import get_pipeline

        settings = get_pipeline().on_configuration_read()
        if not settings.mask_params:
            logger.warning("Request log: no parameters will be masked")
        setting_changed.connect(_reload_on_change, dispatch_uid='request_log_settings')
