"""
WSGI entry point for the payment broker.

Gunicorn (or any WSGI server) imports ``application`` from this module.
The callback endpoints are synchronous Django views, so WSGI is the
primary deployment target; ``config.asgi`` is provided for ASGI servers.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
