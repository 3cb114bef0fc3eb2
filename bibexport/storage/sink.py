"""Output sinks receiving serialized records.

Sinks are append targets shared by all workers of an export; each
implementation serializes concurrent writes itself.
"""

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TextIO


class Sink(ABC):
    """Abstract base class for record sinks."""

    @abstractmethod
    def write(self, text: str) -> None:
        """Append one record's text."""
        pass

    def close(self) -> None:
        """Release any held resources."""
        pass

    def __enter__(self) -> "Sink":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class StringSink(Sink):
    """Collect records in memory."""

    def __init__(self):
        self._parts: list[str] = []
        self._lock = threading.Lock()

    def write(self, text: str) -> None:
        with self._lock:
            self._parts.append(text)

    def getvalue(self) -> str:
        """Get everything written so far."""
        with self._lock:
            return "".join(self._parts)

    def __len__(self) -> int:
        with self._lock:
            return len(self._parts)


class FileSink(Sink):
    """Write records to a file or an open text stream.

    A path is opened lazily on the first write and closed by
    ``close``; a stream passed in is never closed.
    """

    def __init__(self, target: Path | str | TextIO, encoding: str = "utf-8"):
        self._lock = threading.RLock()
        self.encoding = encoding
        if isinstance(target, str | Path):
            self.path: Path | None = Path(target)
            self._stream: TextIO | None = None
        else:
            self.path = None
            self._stream = target

    def write(self, text: str) -> None:
        with self._lock:
            if self._stream is None:
                assert self.path is not None
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._stream = open(self.path, "w", encoding=self.encoding)
            self._stream.write(text)

    def close(self) -> None:
        with self._lock:
            if self.path is not None and self._stream is not None:
                self._stream.close()
                self._stream = None
