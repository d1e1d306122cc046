"""External executables that pre-process the serial output of the target.

Each processor reads from stdin and writes to stdout. Processors run in the
order given and receive the path of the ELF file as first argument when one
is available. Output may arrive in chunks that are not split at valid UTF-8
character boundaries.
"""

from __future__ import annotations

import os
import queue
import subprocess
import threading
from pathlib import Path


class ProcessorLaunchError(OSError):
    """Raised when an external processor cannot be started."""

    def __init__(self, executable: str) -> None:
        super().__init__(f"Failed to launch '{executable}'")
        self.executable = executable


class _Processor:
    def __init__(self, child: subprocess.Popen[bytes]) -> None:
        self._child = child
        self._received: queue.Queue[bytes] = queue.Queue()
        assert child.stdout is not None
        self._reader = threading.Thread(
            target=self._pump, args=(child.stdout.fileno(),), daemon=True
        )
        self._reader.start()

    def _pump(self, fd: int) -> None:
        while True:
            try:
                chunk = os.read(fd, 1024)
            except OSError:
                return
            if not chunk:
                return
            self._received.put(chunk)

    def send(self, data: bytes) -> None:
        stdin = self._child.stdin
        if stdin is None or not data:
            return
        try:
            stdin.write(data)
            stdin.flush()
        except (OSError, ValueError):
            pass

    def try_receive(self) -> bytes:
        chunks = []
        while True:
            try:
                chunks.append(self._received.get_nowait())
            except queue.Empty:
                return b"".join(chunks)

    def close(self) -> None:
        if self._child.poll() is None:
            self._child.kill()
        self._child.wait()
        for stream in (self._child.stdin, self._child.stdout):
            if stream is not None:
                try:
                    stream.close()
                except OSError:
                    pass


class ExternalProcessors:
    """A chain of external processors fed with serial output."""

    def __init__(self, processors: str | None = None, elf: Path | str | None = None) -> None:
        args = [str(elf)] if elf is not None else []
        self._processors: list[_Processor] = []
        for executable in processors.split(",") if processors is not None else ():
            try:
                child = subprocess.Popen(
                    [executable, *args],
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=None,
                )
            except OSError as exc:
                self.close()
                raise ProcessorLaunchError(executable) from exc
            self._processors.append(_Processor(child))

    def process(self, data: bytes) -> bytes:
        """Feed ``data`` through the chain and return whatever output is ready."""
        buffer = bytes(data)
        for processor in self._processors:
            processor.send(buffer)
            buffer = processor.try_receive()
        return buffer

    def close(self) -> None:
        """Terminate every processor."""
        while self._processors:
            self._processors.pop().close()

    def __enter__(self) -> ExternalProcessors:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()