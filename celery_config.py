# 📄 File: celery_config.py
#
# 🧭 Purpose (Layman Explanation):
# Settings for SproutSync's background worker, the part that wakes up every minute to send
# plant care reminders even when nobody has the app open.
#
# 🧪 Purpose (Technical Summary):
# Celery configuration for the reminder jobs: Redis broker/result backend, kombu queues,
# per-environment config classes and the beat schedule that drives due and overdue task
# notifications.
#
# 🔗 Dependencies:
# - celery, kombu
# - Redis server (message broker)
# - sproutsync.shared.config.settings
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.background_jobs.tasks.care_reminders
# - celery worker / celery beat processes (``celery -A celery_config worker -B``)

import logging
from datetime import timedelta

from celery import Celery
from kombu import Queue

from sproutsync.shared.config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

TASKS_MODULE = "sproutsync.background_jobs.tasks.care_reminders"

# =============================================================================
# CELERY CONFIGURATION CLASS
# =============================================================================


class CeleryConfig:
    """
    Celery configuration class for SproutSync.

    Defines broker, task execution, routing and scheduling settings.
    """

    # =========================================================================
    # BROKER AND BACKEND SETTINGS
    # =========================================================================

    broker_url = settings.CELERY_BROKER_URL
    result_backend = settings.CELERY_RESULT_BACKEND

    broker_connection_retry_on_startup = True
    broker_connection_max_retries = 10
    broker_heartbeat = 30
    broker_pool_limit = 10

    result_expires = timedelta(hours=1)

    # =========================================================================
    # TASK SETTINGS
    # =========================================================================

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]
    timezone = "UTC"
    enable_utc = True

    task_default_queue = "default"
    task_default_exchange = "default"
    task_default_exchange_type = "direct"
    task_default_routing_key = "default"

    # A cycle that overruns the next tick is skipped by the scheduler lock anyway
    task_time_limit = 300
    task_soft_time_limit = 240
    task_acks_late = True
    worker_prefetch_multiplier = 1
    task_reject_on_worker_lost = True

    # =========================================================================
    # QUEUE DEFINITIONS
    # =========================================================================

    task_routes = {
        f"{TASKS_MODULE}.*": {"queue": "notifications"},
    }

    task_queues = (
        Queue("notifications", routing_key="notifications"),
        Queue("default", routing_key="default"),
    )

    # =========================================================================
    # WORKER SETTINGS
    # =========================================================================

    worker_max_tasks_per_child = 1000
    worker_hijack_root_logger = False
    worker_log_format = "[%(asctime)s: %(levelname)s/%(processName)s] %(message)s"
    worker_task_log_format = "[%(asctime)s: %(levelname)s/%(processName)s][%(task_name)s(%(task_id)s)] %(message)s"

    # =========================================================================
    # BEAT SCHEDULER SETTINGS
    # =========================================================================

    beat_schedule = {
        "send-due-task-notifications": {
            "task": f"{TASKS_MODULE}.send_due_task_notifications",
            "schedule": timedelta(minutes=1),
            "options": {"queue": "notifications", "expires": 55},
        },
        "process-overdue-task-notifications": {
            "task": f"{TASKS_MODULE}.process_overdue_task_notifications",
            "schedule": timedelta(minutes=1),
            "options": {"queue": "notifications", "expires": 55},
        },
    }

    beat_scheduler = "celery.beat:PersistentScheduler"
    beat_schedule_filename = "celerybeat-schedule"

    # =========================================================================
    # MONITORING
    # =========================================================================

    task_send_sent_event = True
    task_track_started = True
    worker_send_task_events = True


# =============================================================================
# ENVIRONMENT-SPECIFIC CONFIGURATIONS
# =============================================================================

class DevelopmentCeleryConfig(CeleryConfig):
    """Development-specific Celery configuration."""

    worker_log_level = "DEBUG"


class ProductionCeleryConfig(CeleryConfig):
    """Production-specific Celery configuration."""

    worker_log_level = "INFO"
    worker_max_tasks_per_child = 5000


class TestingCeleryConfig(CeleryConfig):
    """Runs tasks inline without a broker."""

    task_always_eager = True
    task_eager_propagates = True
    broker_url = "memory://"
    result_backend = "cache+memory://"


# =============================================================================
# CONFIG FACTORY
# =============================================================================

def get_celery_config() -> CeleryConfig:
    """
    Pick the Celery configuration for the current ENVIRONMENT.

    Returns:
        CeleryConfig: Configuration instance for current environment
    """
    config_map = {
        "development": DevelopmentCeleryConfig,
        "testing": TestingCeleryConfig,
        "staging": ProductionCeleryConfig,
        "production": ProductionCeleryConfig,
    }

    config_class = config_map.get(settings.ENVIRONMENT.lower(), DevelopmentCeleryConfig)
    return config_class()


# =============================================================================
# CELERY APPLICATION INSTANCE
# =============================================================================

app = Celery("sproutsync", include=[TASKS_MODULE])

celery_config = get_celery_config()
app.config_from_object(celery_config)

logger.debug(f"🧵 Celery configured for {settings.ENVIRONMENT} with broker {celery_config.broker_url}")


if __name__ == "__main__":
    app.start()
