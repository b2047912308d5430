"""
WSGI config for the Django application.

Serves the HTTP API only; the WebSocket endpoint needs the ASGI application
in config/asgi.py. Useful for running the REST surface behind gunicorn or
for management tooling that expects a WSGI callable.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
