"""External task worker for a Camunda-style process engine.

Why not an async client or a task queue?
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
The engine already is the queue: fetch-and-lock hands out work and owns
retries, lock expiry and incidents. The worker only needs a blocking poll loop
that dispatches each locked task to its topic handler on one thread, so the
lock window a handler sees is never eaten by local queueing.
"""

__version__ = "0.1.0"
