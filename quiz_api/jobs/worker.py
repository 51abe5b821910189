from rq import Worker
from quiz_api.jobs.queue import queue, redis
from quiz_api.jobs.session_sweep import purge_expired_sessions
from quiz_api.core.config import settings
from quiz_api.core.logging_config import configure_logging
if __name__ == "__main__":
    configure_logging()
    queue.enqueue(purge_expired_sessions)
    w = Worker([settings.RQ_QUEUE], connection=redis)
    w.work(with_scheduler=True)
