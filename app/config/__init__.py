# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, root URLconf, WSGI application and Celery app.
#
# The Celery app is imported here so it is loaded when Django starts and
# shared_task decorators bind to it.
# =============================================================================

from config.celery import app as celery_app

__all__ = ("celery_app",)
