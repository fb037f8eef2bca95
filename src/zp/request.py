from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Mapping

from .filters import Filter

if TYPE_CHECKING:
    from .oauth import TokenSupplier

API_ROOT = "https://projectsapi.zoho.com/restapi/"
DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to address one Zoho endpoint, without doing any I/O.

    Descriptors are values: every ``with_*`` call returns a new instance, so a
    descriptor handed to an iterator can never be changed underneath it.
    """

    path: str
    token: TokenSupplier
    id: int | None = None
    parameters: Mapping[str, str] = field(default_factory=dict)
    root: str = API_ROOT

    def with_filter(self, *options: Filter) -> RequestDescriptor:
        parameters = dict(self.parameters)
        for option in options:
            if option.key == "range":
                parameters[option.key] = str(_clamp_range(option.value))
            else:
                parameters[option.key] = option.value
        return replace(self, parameters=parameters)

    def with_id(self, item_id: int | None) -> RequestDescriptor:
        return replace(self, id=item_id)

    def with_path(self, path: str) -> RequestDescriptor:
        return replace(self, path=path, id=None)

    def uri(self) -> str:
        if self.id is not None:
            return f"{self.root}{self.path}{self.id}/"
        return f"{self.root}{self.path}"

    def params(self) -> dict[str, str]:
        return dict(self.parameters)

    def page_size(self) -> int:
        if "range" not in self.parameters:
            return DEFAULT_PAGE_SIZE
        return _clamp_range(self.parameters["range"])


def _clamp_range(value: str) -> int:
    try:
        size = int(value)
    except ValueError:
        return DEFAULT_PAGE_SIZE
    # the server never returns more than 100 per page
    if size <= 0 or size > DEFAULT_PAGE_SIZE:
        return DEFAULT_PAGE_SIZE
    return size
