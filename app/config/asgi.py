"""
ASGI entry point for the payment broker.

Exposes ``application`` for ASGI servers such as Uvicorn. All views are
synchronous; Django runs them in a thread pool under ASGI.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_asgi_application()
