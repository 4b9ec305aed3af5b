"""Run a subprocess while streaming its output under a total and an idle timeout.

Stdout and stderr are merged. A reader thread forwards raw chunks through a
queue so the calling thread can enforce both deadlines while output arrives
(or fails to). Either deadline stops the process: SIGTERM first so a
`docker run` client can forward the stop to its container, then SIGKILL once
the grace period has passed.
"""

import codecs
import queue
import subprocess
import threading
import time
from collections.abc import Callable, Sequence

_EOF = object()

POLL_INTERVAL = 0.1

# Seconds between SIGTERM and SIGKILL, matching the `docker stop` default
STOP_GRACE = 10


class ProcessTimedOut(Exception):
    """Raised after a process was stopped for exceeding a timeout.

    Attributes:
        kind: 'total' (max runtime) or 'idle' (max time since last output)
        limit: The limit in seconds that was exceeded
    """

    def __init__(self, kind: str, limit: float):
        label = "timeout" if kind == "total" else "idle timeout"
        super().__init__(f"exceeded the {label} of {limit} seconds")
        self.kind = kind
        self.limit = limit


def _pump(stream, chunks: queue.Queue) -> None:
    """Copy raw output from the pipe into the queue until EOF."""
    try:
        while True:
            data = stream.read1(4096)
            if not data:
                break
            chunks.put(data)
    finally:
        chunks.put(_EOF)


def _stop(process: subprocess.Popen, grace: float) -> None:
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


def run_streaming(
    cmd: Sequence[str],
    on_output: Callable[[str], None],
    timeout: float = 0,
    idle_timeout: float = 0,
    poll_interval: float = POLL_INTERVAL,
    stop_grace: float = STOP_GRACE,
) -> int:
    """Run ``cmd`` to completion, passing decoded output to ``on_output`` as it arrives.

    Args:
        cmd: Command and arguments
        on_output: Called with each decoded chunk of combined stdout/stderr
        timeout: Max total runtime in seconds, 0 for unbounded
        idle_timeout: Max seconds without output, 0 for unbounded
        poll_interval: How often deadlines are checked while waiting
        stop_grace: Seconds a terminated process gets before it is killed

    Returns:
        The process exit status

    Raises:
        ProcessTimedOut: If a deadline passed; the process has been stopped
        OSError: If the executable cannot be started
    """
    process = subprocess.Popen(
        list(cmd),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
    )
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    chunks: queue.Queue = queue.Queue()
    reader = threading.Thread(target=_pump, args=(process.stdout, chunks), daemon=True)
    reader.start()

    started = last_output = time.monotonic()
    output_open = True

    try:
        while True:
            now = time.monotonic()
            if timeout and now - started > timeout:
                raise ProcessTimedOut("total", timeout)
            if idle_timeout and now - last_output > idle_timeout:
                raise ProcessTimedOut("idle", idle_timeout)

            if output_open:
                try:
                    chunk = chunks.get(timeout=poll_interval)
                except queue.Empty:
                    continue
                if chunk is _EOF:
                    output_open = False
                    tail = decoder.decode(b"", final=True)
                    if tail:
                        on_output(tail)
                    continue
                text = decoder.decode(chunk)
                if text:
                    on_output(text)
                last_output = time.monotonic()
            else:
                try:
                    return process.wait(timeout=poll_interval)
                except subprocess.TimeoutExpired:
                    continue
    except BaseException:
        _stop(process, stop_grace)
        raise
    finally:
        reader.join(timeout=1)
        process.stdout.close()
