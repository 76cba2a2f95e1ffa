import os

bind = os.getenv("BIND", "0.0.0.0:8000")
# AI quota buckets live in worker memory: keep one worker and no max_requests recycling
workers = int(os.getenv("WEB_CONCURRENCY", "1"))
worker_class = "uvicorn.workers.UvicornWorker"
wsgi_app = "improver.main:app"
timeout = 90
keepalive = 5
accesslog = "-"
errorlog = "-"
loglevel = "info"
