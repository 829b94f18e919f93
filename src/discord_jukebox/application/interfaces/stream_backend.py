"""Port interface for stream extraction backends and the stream they produce."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import IO

from discord_jukebox.domain.shared.messages import ErrorMessages
from discord_jukebox.domain.shared.types import HttpUrlStr


@dataclass(eq=False)
class AudioStream:
    """A live audio source ready to hand to the voice sink.

    Exactly one of ``url`` (a direct media URL FFmpeg can read) or ``pipe``
    (a readable byte stream, e.g. a subprocess stdout) is set. ``close``
    releases whatever the backend allocated and is safe to call twice.
    """

    backend: str
    url: str | None = None
    pipe: IO[bytes] | None = None
    title: str | None = None
    http_headers: dict[str, str] = field(default_factory=dict)
    closer: Callable[[], None] | None = field(default=None, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if (self.url is None) == (self.pipe is None):
            raise ValueError(ErrorMessages.STREAM_NEEDS_ONE_SOURCE)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_pipe(self) -> bool:
        return self.pipe is not None

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.closer is not None:
            self.closer()


class StreamBackend(ABC):
    """Turns a resolved track URL into a live :class:`AudioStream`.

    An attempt validates the URL, fetches whatever info it needs and builds
    the stream. Any failure is raised; the extractor records and classifies it.
    """

    name: str

    @abstractmethod
    async def open(self, url: HttpUrlStr) -> AudioStream:
        ...
