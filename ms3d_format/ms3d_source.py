"""Byte sources feeding the MS3D reader.

The reader only ever asks for "exactly the next N bytes". Two backends
provide that: one over a binary stream (file object, socket file, gzip
file, ...) and one over an in-memory buffer.
"""

from abc import ABC, abstractmethod

from .ms3d_errors import TruncatedError


class ByteSource(ABC):
    """Minimal read contract used by Ms3dReader.

    Attributes:
        offset: number of bytes consumed so far
    """

    offset = 0

    @abstractmethod
    def next_exact(self, n):
        """Return exactly the next ``n`` bytes.

        The result is a bytes-like object of length ``n``. It may be a
        view into storage owned by the source; callers must copy out what
        they need before calling next_exact again.

        Raises:
            TruncatedError: if fewer than ``n`` bytes remain
        """


class StreamSource(ByteSource):
    """Reads from a binary stream through a reusable scratch buffer.

    The returned memoryview aliases the scratch buffer and is only valid
    until the next call. Spans larger than CHUNK_SIZE are read chunk by
    chunk into a fresh buffer, so a corrupt length field costs no more
    memory than the stream actually holds. The stream is not closed by
    this class.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(self, stream):
        self.stream = stream
        self.offset = 0
        self._scratch = bytearray()
        self._readinto = getattr(stream, "readinto", None)

    def next_exact(self, n):
        if n > self.CHUNK_SIZE:
            return self._next_large(n)

        if n > len(self._scratch):
            # New allocation rather than resize: a view handed out by the
            # previous call may still be alive.
            self._scratch = bytearray(n)
        view = memoryview(self._scratch)[:n]

        got = 0
        while got < n:
            if self._readinto is not None:
                count = self._readinto(view[got:])
            else:
                chunk = self.stream.read(n - got)
                count = len(chunk) if chunk else 0
                view[got:got + count] = chunk if chunk else b""
            if not count:
                break
            got += count

        return self._finish(n, got, view)

    def _next_large(self, n):
        data = bytearray()
        while len(data) < n:
            chunk = self.stream.read(min(self.CHUNK_SIZE, n - len(data)))
            if not chunk:
                break
            data += chunk
        return self._finish(n, len(data), memoryview(data))

    def _finish(self, n, got, view):
        if got < n:
            offset = self.offset
            self.offset += got
            raise TruncatedError(n, got, offset)

        self.offset += n
        return view


class BufferSource(ByteSource):
    """Hands out zero-copy slices of an in-memory buffer."""

    def __init__(self, buffer):
        self.view = memoryview(buffer).cast("B")
        self.offset = 0

    @property
    def remaining(self):
        return len(self.view) - self.offset

    def next_exact(self, n):
        available = self.remaining
        if n > available:
            offset = self.offset
            self.offset = len(self.view)
            raise TruncatedError(n, available, offset)

        start = self.offset
        self.offset += n
        return self.view[start:self.offset]
