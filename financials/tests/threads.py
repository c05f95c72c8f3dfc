import threading

from django.db import connection

WORKERS = 5


def run_concurrently(fn, workers=WORKERS):
    """Call ``fn`` from ``workers`` threads released at the same instant.

    Returns the results and exceptions in completion order. Each thread
    gets its own database connection and closes it before exiting.
    """
    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def worker():
        try:
            barrier.wait()
            result = fn()
        except Exception as e:
            result = e
        finally:
            connection.close()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return outcomes
