# Load the Celery app whenever Django starts so that @shared_task functions
# in installed apps bind to it and beat can resolve the sweep task by name.

from config.celery import app as celery_app

__all__ = ("celery_app",)
