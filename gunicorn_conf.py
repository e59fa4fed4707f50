import os

# PORT is what most PaaS hosts inject; GUNICORN_BIND overrides it entirely
bind = os.getenv("GUNICORN_BIND", f"0.0.0.0:{os.getenv('PORT', '4000')}")
workers = int(os.getenv("WEB_CONCURRENCY", 2))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = int(os.getenv("GUNICORN_TIMEOUT", 30))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", 30))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", 5))

accesslog = "-"
errorlog = "-"
wsgi_app = "reset_api.main:app"
