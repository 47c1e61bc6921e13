"""Gunicorn production configuration.

Run from the repository root: gunicorn -c gunicorn.conf.py
"""
import multiprocessing
import os

wsgi_app = "travel_portal.main:app"
pythonpath = "backend"

bind = os.getenv("BIND", "0.0.0.0:8000")
# Submission dedup is per process; each worker keeps its own window.
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
timeout = 120
keepalive = 5
max_requests = 1000
max_requests_jitter = 100
preload_app = True
accesslog = "-"
errorlog = "-"
loglevel = "info"
