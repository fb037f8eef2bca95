"""Endpoint descriptors for the Zoho Projects resources the client knows about.

These are data only. The request, transport and pagination layers read them
to build paths, check verbs and decode list payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from .errors import DecodeError
from .models import (
    Activity,
    Bug,
    Category,
    Event,
    Forum,
    ForumComment,
    Milestone,
    Portal,
    PortalUser,
    Project,
    Status,
    Task,
    Tasklist,
)

READ_ONLY = frozenset({"GET"})
ALL_METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})


@dataclass(frozen=True)
class ChildCollection:
    flag: str
    segment: str

    def path_for(self, base_path: str, parent_id: int) -> str:
        return f"{base_path}{parent_id}/{self.segment}"


@dataclass(frozen=True)
class Resource:
    name: str
    path: str
    collection_key: str
    model: type[BaseModel]
    methods: frozenset[str] = ALL_METHODS
    children: ChildCollection | None = None

    def path_for(self, **ids: Any) -> str:
        return self.path.format(**ids)

    def allows(self, method: str) -> bool:
        return method.upper() in self.methods

    def decode(self, payload: Any) -> list[Any]:
        if not isinstance(payload, dict) or self.collection_key not in payload:
            raise DecodeError(f"Expected a {self.collection_key!r} list in {self.name} response")
        items = payload[self.collection_key]
        if not isinstance(items, list):
            raise DecodeError(f"{self.collection_key!r} in {self.name} response is not a list")
        try:
            return [self.model.model_validate(item) for item in items]
        except ValidationError as exc:
            raise DecodeError(f"Malformed {self.name} item: {exc}") from exc

    def has_children(self, item: Any) -> bool:
        if self.children is None:
            return False
        return bool(getattr(item, self.children.flag, False))


PROJECT_PATH = "portal/{portal_id}/projects/{project_id}/"

PORTALS = Resource("portals", "portals/", "portals", Portal, methods=READ_ONLY)
PORTAL_USERS = Resource("portal users", "portal/{portal_id}/users/", "users", PortalUser)
PROJECTS = Resource("projects", "portal/{portal_id}/projects/", "projects", Project)
TASKS = Resource(
    "tasks",
    PROJECT_PATH + "tasks/",
    "tasks",
    Task,
    children=ChildCollection(flag="subtasks", segment="subtasks/"),
)
TASKLISTS = Resource("tasklists", PROJECT_PATH + "tasklists/", "tasklists", Tasklist)
TASKLIST_TASKS = Resource(
    "tasklist tasks",
    PROJECT_PATH + "tasklists/{tasklist_id}/tasks/",
    "tasks",
    Task,
)
BUGS = Resource("bugs", PROJECT_PATH + "bugs/", "bugs", Bug)
CATEGORIES = Resource(
    "categories",
    PROJECT_PATH + "categories/",
    "categories",
    Category,
    methods=frozenset({"GET", "POST", "DELETE"}),
)
MILESTONES = Resource("milestones", PROJECT_PATH + "milestones/", "milestones", Milestone)
PROJECT_USERS = Resource("project users", PROJECT_PATH + "users/", "users", PortalUser)
FORUMS = Resource("forums", PROJECT_PATH + "forums/", "forums", Forum)
FORUM_COMMENTS = Resource(
    "forum comments",
    PROJECT_PATH + "forums/{forum_id}/comments/",
    "comments",
    ForumComment,
    methods=frozenset({"GET", "POST", "DELETE"}),
)
EVENTS = Resource("events", PROJECT_PATH + "events/", "events", Event)
ACTIVITIES = Resource("activities", PROJECT_PATH + "activities/", "activities", Activity, methods=READ_ONLY)
STATUSES = Resource(
    "statuses",
    PROJECT_PATH + "statuses/",
    "statuses",
    Status,
    methods=frozenset({"GET", "POST"}),
)
