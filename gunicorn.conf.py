"""Gunicorn configuration for the HotelDesk back office."""

import os

# Server socket
bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# Worker processes: 2 workers with 4 threads each.
# SQLite has a single writer; reservation writes queue on BEGIN IMMEDIATE.
workers = int(os.environ.get('GUNICORN_WORKERS', 2))
threads = 4
worker_class = 'gthread'

# Timeout: bulk imports can take a while
timeout = 120
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = 'logs/gunicorn-access.log'
errorlog = 'logs/gunicorn-error.log'
loglevel = 'info'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = 'hoteldesk'

# Preload app for faster worker startups
preload_app = True

# Worker recycling
max_requests = 1000
max_requests_jitter = 50

# Security
limit_request_line = 8190
limit_request_fields = 100
limit_request_field_size = 8190
