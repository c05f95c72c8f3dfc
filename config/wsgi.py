import os
from django.core.wsgi import get_wsgi_application

# settings load .env themselves
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
application = get_wsgi_application()
