# gunicorn.conf.py
# gunicorn -c gunicorn.conf.py   (the app factory is set below)
import multiprocessing
import os

from flexpro.app_logger import json_logging_config

wsgi_app = "flexpro.main:create_app"
factory = True

bind = os.getenv("FLEXPRO_BIND", f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '8000')}")

# async workers spend their time waiting on the database; a few per core is plenty
workers = int(os.getenv("WEB_CONCURRENCY", min(multiprocessing.cpu_count() * 2 + 1, 9)))
worker_class = "uvicorn.workers.UvicornWorker"
worker_tmp_dir = "/dev/shm"
# every worker opens its own async engine after fork
preload_app = False

timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", "5"))

# recycle workers now and then
max_requests = int(os.getenv("GUNICORN_MAX_REQUESTS", "1000"))
max_requests_jitter = int(os.getenv("GUNICORN_MAX_REQUESTS_JITTER", "100"))

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info")
capture_output = True
logconfig_dict = json_logging_config(os.getenv("FLEXPRO_LOG_LEVEL", loglevel))
