"""
Gunicorn configuration for running main:app behind Uvicorn workers.
"""
import os
from pathlib import Path

from framework.config import settings

LOG_DIR = Path(settings.LOG_DIR)
LOG_DIR.mkdir(parents=True, exist_ok=True)

bind = os.getenv("BIND", "0.0.0.0:8000")
# One unit of work per request keeps workers independent; scale by processes
workers = int(os.getenv("WEB_CONCURRENCY", "2"))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 60
keepalive = 5
graceful_timeout = 30

proc_name = (settings.GUNICORN_PROC_NAME or settings.APP_NAME.lower().replace(" ", "-"))[:32]

accesslog = str(LOG_DIR / "gunicorn_access.log")
errorlog = str(LOG_DIR / "gunicorn_error.log")
loglevel = settings.LOG_LEVEL.lower()

# SQLite file databases do not tolerate a shared engine across forks
preload_app = False


def when_ready(server):
    server.log.info("%s is ready. Listening on %s", settings.APP_NAME, server.address)


def on_exit(server):
    server.log.info("%s is shutting down.", settings.APP_NAME)
