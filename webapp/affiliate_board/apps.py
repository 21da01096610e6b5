from django.apps import AppConfig

from src.shared.config.app_settings import get_app_config
from src.shared.logging.log_setup import setup_logging


class AffiliateBoardConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'affiliate_board'
    verbose_name = 'Affiliate board'

    def ready(self):
        # views, the scrape cycle and the robot thread log through structlog
        app_config = get_app_config()
        setup_logging(log_level=app_config.LOG_LEVEL, log_format=app_config.LOG_FORMAT)
