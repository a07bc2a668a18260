"""
WSGI config for the socialdm project.

Served by gunicorn (see gunicorn.conf.py): gunicorn socialdm.wsgi:application
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'socialdm.settings')

application = get_wsgi_application()
