import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class BizManagerConfig(AppConfig):
    name = 'bizmanager'
    verbose_name = 'Business Manager'

    store = None

    def ready(self):
        self.reset_store()

    def reset_store(self):
        """Replace the store with a fresh one built from the current settings."""

        from . import conf
        from .demo import seed_demo_data
        from .store import BusinessStore

        self.store = BusinessStore(
            tax_rate=conf.tax_rate(),
            activity_limit=int(conf.get_setting('ACTIVITY_LOG_LIMIT')),
        )
        if conf.get_setting('SEED_DEMO_DATA'):
            seed_demo_data(self.store)
            logger.info("Business store seeded with demo data")
        return self.store
