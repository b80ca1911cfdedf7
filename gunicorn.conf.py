import os

bind = f"0.0.0.0:{os.getenv('PORT', 8000)}"
# The registration rate limiter is in-process; more workers means a looser limit per client
workers = int(os.getenv('WEB_CONCURRENCY', 1))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
timeout = int(os.getenv('GUNICORN_TIMEOUT', 30))
max_requests = 1000
max_requests_jitter = 100
loglevel = os.getenv('LOG_LEVEL', 'info').lower()
accesslog = "-"
preload_app = True
