"""Client facade: resolves portal/project context and hands out resource requests."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from pydantic import BaseModel

from .errors import DisallowedMethod, EmptyEntityList, MissingContext, MissingEntity
from .filters import Filter
from .oauth import TokenSupplier
from .pagination import ZOHO_RATE_LIMIT, PaginatedIterator, RateLimit
from .request import RequestDescriptor
from .resources import (
    ACTIVITIES,
    BUGS,
    CATEGORIES,
    EVENTS,
    FORUM_COMMENTS,
    FORUMS,
    MILESTONES,
    PORTAL_USERS,
    PORTALS,
    PROJECT_USERS,
    PROJECTS,
    STATUSES,
    TASKLIST_TASKS,
    TASKLISTS,
    TASKS,
    Resource,
)
from .transport import Transport

logger = logging.getLogger(__name__)


class ResourceRequest:
    def __init__(
        self,
        transport: Transport,
        resource: Resource,
        descriptor: RequestDescriptor,
        base_path: str | None = None,
    ) -> None:
        self.transport = transport
        self.resource = resource
        self.descriptor = descriptor
        self.base_path = base_path if base_path is not None else descriptor.path

    def filter(self, *options: Filter) -> ResourceRequest:
        return ResourceRequest(
            self.transport, self.resource, self.descriptor.with_filter(*options), self.base_path
        )

    def _send(
        self,
        method: str,
        data: BaseModel | Mapping[str, Any] | None = None,
        allow_empty: bool = False,
        suffix: str = "",
    ) -> dict[str, Any] | None:
        if not self.resource.allows(method):
            raise DisallowedMethod(method, self.resource.name)
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_none=True)
        return self.transport.send(
            method,
            self.descriptor.uri() + suffix,
            self.descriptor.token.access_token(),
            params=self.descriptor.params(),
            data=data,
            allow_empty=allow_empty,
        )

    def get(self) -> list[Any]:
        payload = self._send("GET", allow_empty=True)
        if payload is None:
            return []
        return self.resource.decode(payload)

    def post(self, data: BaseModel | Mapping[str, Any]) -> list[Any]:
        return self.resource.decode(self._send("POST", data))

    def put(self, data: BaseModel | Mapping[str, Any]) -> list[Any]:
        if not self.resource.allows("PUT"):
            raise DisallowedMethod("PUT", self.resource.name)
        # Zoho updates an item with a POST to its own URI
        return self.resource.decode(self._send("POST", data))

    def delete(self) -> None:
        self._send("DELETE", allow_empty=True)

    def action(self, method: str, name: str) -> dict[str, Any] | None:
        """Call a verb endpoint under the item, e.g. ``forums/7/follow``."""
        return self._send(method, allow_empty=True, suffix=name)

    def iter_get(
        self,
        expand_children: bool = False,
        rate_limit: RateLimit = ZOHO_RATE_LIMIT,
        sleep: Callable[[float], None] | None = None,
    ) -> PaginatedIterator[Any]:
        if not self.resource.allows("GET"):
            raise DisallowedMethod("GET", self.resource.name)
        kwargs: dict[str, Any] = {}
        if sleep is not None:
            kwargs["sleep"] = sleep
        return PaginatedIterator(
            self.transport,
            self.resource,
            self.descriptor,
            expand_children=expand_children,
            rate_limit=rate_limit,
            child_base=self.base_path,
            **kwargs,
        )


class ZohoClient:
    def __init__(
        self,
        tokens: TokenSupplier,
        transport: Transport | None = None,
        portal_id: int | None = None,
        project_id: int | None = None,
    ) -> None:
        self.tokens = tokens
        self.transport = transport if transport is not None else Transport()
        self.portal_id = portal_id
        self.project_id = project_id

    def close(self) -> None:
        self.transport.close()
        close_tokens = getattr(self.tokens, "close", None)
        if close_tokens is not None:
            close_tokens()

    def __enter__(self) -> ZohoClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _portal(self) -> int:
        if self.portal_id is None:
            raise MissingContext("Portal context used before a portal was selected")
        return self.portal_id

    def _project(self) -> int:
        if self.project_id is None:
            raise MissingContext("Project context used before a project was selected")
        return self.project_id

    def _request(self, resource: Resource, item_id: int | None = None, **ids: Any) -> ResourceRequest:
        descriptor = RequestDescriptor(path=resource.path_for(**ids), token=self.tokens, id=item_id)
        return ResourceRequest(self.transport, resource, descriptor)

    def _project_request(self, resource: Resource, item_id: int | None = None, **ids: Any) -> ResourceRequest:
        return self._request(resource, item_id, portal_id=self._portal(), project_id=self._project(), **ids)

    def set_portal(self, name: str) -> ZohoClient:
        portals = self.portals().get()
        if not portals:
            raise EmptyEntityList("portal")
        match = next((portal for portal in portals if portal.name == name), None)
        if match is None:
            raise MissingEntity(name)
        self.portal_id = match.id
        logger.debug("Using portal %s (%s)", name, match.id)
        return self

    def set_project(self, name: str) -> ZohoClient:
        projects = list(self.projects().iter_get())
        if not projects:
            raise EmptyEntityList("project")
        match = next((project for project in projects if project.name == name), None)
        if match is None:
            raise MissingEntity(name)
        self.project_id = match.id
        logger.debug("Using project %s (%s)", name, match.id)
        return self

    def portals(self) -> ResourceRequest:
        return self._request(PORTALS)

    def portal_users(self) -> ResourceRequest:
        return self._request(PORTAL_USERS, portal_id=self._portal())

    def projects(self) -> ResourceRequest:
        return self._request(PROJECTS, portal_id=self._portal())

    def project(self, project_id: int) -> ResourceRequest:
        return self._request(PROJECTS, project_id, portal_id=self._portal())

    def tasks(self) -> ResourceRequest:
        return self._project_request(TASKS)

    def task(self, task_id: int) -> ResourceRequest:
        return self._project_request(TASKS, task_id)

    def subtasks(self, task_id: int) -> ResourceRequest:
        request = self._project_request(TASKS)
        base_path = request.descriptor.path
        path = TASKS.children.path_for(base_path, task_id)
        return ResourceRequest(self.transport, TASKS, request.descriptor.with_path(path), base_path)

    def tasklists(self) -> ResourceRequest:
        return self._project_request(TASKLISTS)

    def tasklist(self, tasklist_id: int) -> ResourceRequest:
        return self._project_request(TASKLISTS, tasklist_id)

    def tasklist_tasks(self, tasklist_id: int) -> ResourceRequest:
        return self._project_request(TASKLIST_TASKS, tasklist_id=tasklist_id)

    def bugs(self) -> ResourceRequest:
        return self._project_request(BUGS)

    def bug(self, bug_id: int) -> ResourceRequest:
        return self._project_request(BUGS, bug_id)

    def categories(self) -> ResourceRequest:
        return self._project_request(CATEGORIES)

    def category(self, category_id: int) -> ResourceRequest:
        return self._project_request(CATEGORIES, category_id)

    def milestones(self) -> ResourceRequest:
        return self._project_request(MILESTONES)

    def milestone(self, milestone_id: int) -> ResourceRequest:
        return self._project_request(MILESTONES, milestone_id)

    def project_users(self) -> ResourceRequest:
        return self._project_request(PROJECT_USERS)

    def forums(self) -> ResourceRequest:
        return self._project_request(FORUMS)

    def forum(self, forum_id: int) -> ResourceRequest:
        return self._project_request(FORUMS, forum_id)

    def follow_forum(self, forum_id: int) -> None:
        self.forum(forum_id).action("POST", "follow")

    def unfollow_forum(self, forum_id: int) -> None:
        self.forum(forum_id).action("POST", "unfollow")

    def forum_comments(self, forum_id: int) -> ResourceRequest:
        return self._project_request(FORUM_COMMENTS, forum_id=forum_id)

    def forum_comment(self, forum_id: int, comment_id: int) -> ResourceRequest:
        return self._project_request(FORUM_COMMENTS, comment_id, forum_id=forum_id)

    def mark_best_answer(self, forum_id: int, comment_id: int) -> None:
        self.forum_comment(forum_id, comment_id).action("POST", "markbestanswer")

    def unmark_best_answer(self, forum_id: int, comment_id: int) -> None:
        self.forum_comment(forum_id, comment_id).action("DELETE", "markbestanswer")

    def events(self) -> ResourceRequest:
        return self._project_request(EVENTS)

    def event(self, event_id: int) -> ResourceRequest:
        return self._project_request(EVENTS, event_id)

    def activities(self) -> ResourceRequest:
        return self._project_request(ACTIVITIES)

    def statuses(self) -> ResourceRequest:
        return self._project_request(STATUSES)
