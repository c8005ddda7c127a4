"""Gunicorn settings for serving the merch store API (``gunicorn app:app``)."""
import os

wsgi_app = "app:app"

# The storefront client talks to port 3001 in every environment.
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:3001")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
timeout = int(os.getenv("GUNICORN_TIMEOUT", "30"))

# Requests are already logged by the app with their request id.
accesslog = os.getenv("GUNICORN_ACCESS_LOGFILE") or None
errorlog = os.getenv("GUNICORN_ERROR_LOGFILE", "-")
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")

forwarded_allow_ips = os.getenv("GUNICORN_FORWARDED_ALLOW_IPS", "*")
