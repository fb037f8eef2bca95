"""Lazy iteration over paginated Zoho collections.

Zoho pages with ``index``/``range`` and sends no total count, so a page
shorter than the page size is the only end marker. Items that own a child
collection (tasks with subtasks) are remembered while the top level is
walked and their children are fetched once the top level runs dry.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Iterator, TypeVar

from .errors import ZohoError
from .filters import index
from .request import RequestDescriptor
from .resources import Resource
from .transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RateLimit:
    requests: int = 100
    window: float = 120.0

    @property
    def delay(self) -> float:
        return self.window / self.requests


ZOHO_RATE_LIMIT = RateLimit()


class PaginatedIterator(Iterator[T]):
    def __init__(
        self,
        transport: Transport,
        resource: Resource,
        descriptor: RequestDescriptor,
        expand_children: bool = False,
        rate_limit: RateLimit = ZOHO_RATE_LIMIT,
        sleep: Callable[[float], None] = time.sleep,
        child_base: str | None = None,
    ) -> None:
        self._transport = transport
        self._resource = resource
        self._descriptor = descriptor
        # child collections hang off the resource root, not the request path
        self._base_path = child_base if child_base is not None else descriptor.path
        self._page_size = descriptor.page_size()
        self._expand = expand_children and resource.children is not None
        self._rate_limit = rate_limit
        self._sleep = sleep

        self._buffer: deque[Any] = deque()
        self._last_full = True
        self._start = 0
        self._parent_ids: list[int] = []
        self._in_children = False
        self._child_requests = 0
        self._notified = False
        self._done = False

    def __iter__(self) -> PaginatedIterator[T]:
        return self

    def __next__(self) -> T:
        item = self.try_next()
        if item is None:
            raise StopIteration
        return item

    @property
    def pending_parents(self) -> int:
        return len(self._parent_ids)

    def try_next(self) -> T | None:
        """Return the next item, or ``None`` once the collection is exhausted.

        A failed page fetch ends the iteration: the error is raised once and
        every later call returns ``None``.
        """
        while True:
            if self._buffer:
                return self._pop()
            if self._done:
                return None
            if not self._last_full and not self._descend():
                self._done = True
                return None
            self._fetch_page()

    def _pop(self) -> T:
        item = self._buffer.popleft()
        if self._expand and self._resource.has_children(item):
            self._parent_ids.append(item.id)
        return item

    def _descend(self) -> bool:
        if not self._expand or not self._parent_ids:
            return False
        parent_id = self._parent_ids.pop()
        path = self._resource.children.path_for(self._base_path, parent_id)
        self._descriptor = self._descriptor.with_path(path)
        self._in_children = True
        self._start = 0
        self._last_full = True
        logger.debug("Expanding children of %s via %s", parent_id, path)
        return True

    def _throttle(self) -> None:
        projected = self._child_requests + len(self._parent_ids) + 1
        if not self._notified and projected > self._rate_limit.requests:
            logger.warning(
                "Expanding %d more %s would exceed %d requests per %.0fs; "
                "slowing down to one request every %.1fs",
                len(self._parent_ids) + 1,
                self._resource.name,
                self._rate_limit.requests,
                self._rate_limit.window,
                self._rate_limit.delay,
            )
            self._notified = True
        if self._notified and self._child_requests >= self._rate_limit.requests:
            self._sleep(self._rate_limit.delay)
        self._child_requests += 1

    def _fetch_page(self) -> None:
        if self._in_children:
            self._throttle()
        request = self._descriptor.with_filter(index(self._start))
        try:
            payload = self._transport.send(
                "GET",
                request.uri(),
                request.token.access_token(),
                params=request.params(),
                allow_empty=True,
            )
            items = [] if payload is None else self._resource.decode(payload)
        except ZohoError:
            self._last_full = False
            self._parent_ids.clear()
            self._done = True
            raise
        self._last_full = len(items) == self._page_size
        self._start += len(items)
        self._buffer.extend(items)
