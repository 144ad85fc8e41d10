import os

bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"

wsgi_app = 'django_config.wsgi:application'

workers = int(os.getenv('GUNICORN_WORKERS', '2'))
# Threads are what the request log renames while a view runs
worker_class = 'gthread'
threads = int(os.getenv('GUNICORN_THREADS', '4'))
max_requests = 1000
max_requests_jitter = 50

timeout = int(os.getenv('GUNICORN_TIMEOUT', '30'))
graceful_timeout = 30
keepalive = 5

# The request log replaces gunicorn's access log
accesslog = None
errorlog = '-'
loglevel = os.getenv('GUNICORN_LOG_LEVEL', 'info')

proc_name = 'request-log-sample'


# ── Worker thread hygiene ─────────────────────────────────────────

def post_request(worker, req, environ, resp):
    """
    Put the worker thread's name back before it picks up the next request.

    The middleware already restores it when the view returns; this covers
    requests that never reached the middleware's cleanup.
    """
    try:
        from request_log.utils.worker_label import restore_thread_name
        restore_thread_name()
    except Exception:
        worker.log.exception("[gunicorn] failed to restore thread name")
