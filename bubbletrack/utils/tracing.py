import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

current_span: ContextVar[Optional['Span']] = ContextVar('current_span', default=None)

logger = logging.getLogger(__name__)


@dataclass
class Span:
    '''Timed section of work, nested under whatever span was active when it opened.'''

    name: str
    started: float = field(default_factory=time.perf_counter)
    ended: Optional[float] = None
    tags: Dict[str, Any] = field(default_factory=dict)
    parent: Optional['Span'] = None

    @property
    def elapsed_ms(self) -> Optional[float]:
        if self.ended is None:
            return None
        return (self.ended - self.started) * 1000

    @property
    def depth(self) -> int:
        return 0 if self.parent is None else self.parent.depth + 1

    def close(self) -> None:
        self.ended = time.perf_counter()
        tags = ', '.join(f'{k}={v}' for k, v in self.tags.items())
        indent = '  ' * self.depth
        logger.debug(f'{indent}{self.name}: {self.elapsed_ms:.2f}ms [{tags}]')


@contextmanager
def trace_span(name: str, tags: Optional[Dict[str, Any]] = None) -> Iterator[Span]:
    '''Time a block of work and log it at DEBUG when it ends.

    Example:
        with trace_span('store.persist', {'count': 3}) as span:
            storage.write(key, payload)
            span.tags['bytes'] = len(payload)
    '''
    span = Span(name=name, tags=dict(tags or {}), parent=current_span.get())
    token = current_span.set(span)
    try:
        yield span
    finally:
        span.close()
        current_span.reset(token)


def tag_current(key: str, value: Any) -> None:
    '''Attach a tag to the active span, if any.'''
    span = current_span.get()
    if span is not None:
        span.tags[key] = value
