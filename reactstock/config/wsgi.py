"""
WSGI config for the reactstock project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'reactstock.config.settings')

application = get_wsgi_application()
