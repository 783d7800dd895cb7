# natours/asgi.py
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "natours.settings")

# Views are async; serve through an ASGI server (uvicorn/daphne) so storage,
# hashing and email calls interleave instead of blocking a worker.
application = get_asgi_application()
