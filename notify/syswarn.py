"""
Side channel for warnings that must never enter the note queue.

If the queue or the endpoints are broken, routing a warning through them would
loop forever, so warnings are printed straight to the console instead.
"""


def syswarn(warn: str) -> None:
    """Print a warning without logging it."""
    print(f"notify: {warn}", flush=True)
