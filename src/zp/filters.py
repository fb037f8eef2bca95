"""Query filters accepted by the Zoho Projects list endpoints.

Every filter is a plain key/value pair whose value is already the wire
string. Enum values are the exact tokens the API accepts; nothing here
validates combinations, the server does that.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


@dataclass(frozen=True)
class Filter:
    key: str
    value: str


class TaskStatus(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    NOT_COMPLETED = "notcompleted"


class TaskTime(str, Enum):
    ALL = "all"
    OVERDUE = "overdue"
    TODAY = "today"
    TOMORROW = "tomorrow"


class TaskPriority(str, Enum):
    ALL = "all"
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StatusType(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class SortColumn(str, Enum):
    CREATED_TIME = "created_time"
    LAST_MODIFIED_TIME = "last_modified_time"


class SortOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class Flag(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"


class MilestoneStatus(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    NOT_COMPLETED = "notcompleted"


class MilestoneDisplay(str, Enum):
    UPCOMING = "upcoming"
    DELAYED = "delayed"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    TEMPLATE = "template"


def join_ids(ids: Iterable[int | str]) -> str:
    return "[" + ",".join(str(item) for item in ids) + "]"


def index(start: int) -> Filter:
    return Filter("index", str(start))


def page_range(size: int) -> Filter:
    return Filter("range", str(size))


def _id_group(key: str):
    def build(ids: Iterable[int | str]) -> Filter:
        return Filter(key, join_ids(ids))

    build.__name__ = key
    return staticmethod(build)


class TaskFilter:
    @staticmethod
    def owner(owner_id: int | str) -> Filter:
        return Filter("owner", str(owner_id))

    @staticmethod
    def status(status: TaskStatus) -> Filter:
        return Filter("status", status.value)

    @staticmethod
    def time(period: TaskTime) -> Filter:
        return Filter("time", period.value)

    @staticmethod
    def priority(priority: TaskPriority) -> Filter:
        return Filter("priority", priority.value)

    @staticmethod
    def tasklist_id(tasklist_id: int) -> Filter:
        return Filter("tasklist_id", str(tasklist_id))

    @staticmethod
    def custom_status(status_id: int) -> Filter:
        return Filter("custom_status", str(status_id))


class BugFilter:
    # id-list filters, serialized as [1,2,3]
    status = _id_group("status")
    severity = _id_group("severity")
    classification = _id_group("classification")
    module = _id_group("module")
    milestone = _id_group("milestone")
    assignee = _id_group("assignee")
    escalation = _id_group("escalation")
    reporter = _id_group("reporter")
    affected = _id_group("affected")

    @staticmethod
    def status_type(status_type: StatusType) -> Filter:
        return Filter("statustype", status_type.value)

    @staticmethod
    def cview_id(view_id: int) -> Filter:
        return Filter("cview_id", str(view_id))

    @staticmethod
    def sort_column(column: SortColumn) -> Filter:
        return Filter("sort_column", column.value)

    @staticmethod
    def sort_order(order: SortOrder) -> Filter:
        return Filter("sort_order", order.value)

    @staticmethod
    def flag(flag: Flag) -> Filter:
        return Filter("flag", flag.value)


class TasklistFilter:
    @staticmethod
    def flag(flag: Flag) -> Filter:
        return Filter("flag", flag.value)

    @staticmethod
    def milestone(milestone_id: int) -> Filter:
        return Filter("milestone_id", str(milestone_id))


class MilestoneFilter:
    @staticmethod
    def status(status: MilestoneStatus) -> Filter:
        return Filter("status", status.value)

    @staticmethod
    def display_type(display: MilestoneDisplay) -> Filter:
        return Filter("display_type", display.value)

    @staticmethod
    def flag(flag: Flag) -> Filter:
        return Filter("flag", flag.value)


class ProjectFilter:
    @staticmethod
    def status(status: ProjectStatus) -> Filter:
        return Filter("status", status.value)

    @staticmethod
    def sort_column(column: SortColumn) -> Filter:
        return Filter("sort_column", column.value)

    @staticmethod
    def sort_order(order: SortOrder) -> Filter:
        return Filter("sort_order", order.value)
