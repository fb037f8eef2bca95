from __future__ import annotations

from pydantic import BaseModel, Field


class Link(BaseModel):
    url: str | None = None


class Owner(BaseModel):
    id: int = 0
    name: str = "Unassigned"


class TaskDetails(BaseModel):
    owners: list[Owner] = Field(default_factory=list)


class TaskStatusInfo(BaseModel):
    id: int | None = None
    name: str | None = None
    type: str | None = None
    color_code: str | None = None


class TasklistRef(BaseModel):
    id: int
    name: str | None = None


class Task(BaseModel):
    id: int
    key: str | None = None
    name: str = ""
    completed: bool = False
    priority: str | None = None
    percent_complete: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    created_by: str | None = None
    subtasks: bool = False
    details: TaskDetails = Field(default_factory=TaskDetails)
    status: TaskStatusInfo | None = None
    tasklist: TasklistRef | None = None


class Classification(BaseModel):
    id: int | None = None
    type: str | None = None


class Bug(BaseModel):
    id: int
    key: str | None = None
    title: str = ""
    flag: str | None = None
    closed: bool = False
    assignee_name: str | None = None
    reported_person: str | None = None
    created_time: str | None = None
    status: Classification | None = None
    severity: Classification | None = None
    classification: Classification | None = None


class MilestoneRef(BaseModel):
    id: int
    name: str | None = None


class Tasklist(BaseModel):
    id: int
    name: str = ""
    completed: bool = False
    flag: str | None = None
    created_time: str | None = None
    sequence: int | None = None
    milestone: MilestoneRef | None = None


class Category(BaseModel):
    id: int
    name: str


class Milestone(BaseModel):
    id: int
    name: str = ""
    flag: str | None = None
    status: str | None = None
    owner_name: str | None = None
    start_date: str | None = None
    end_date: str | None = None


class Portal(BaseModel):
    id: int
    name: str
    default: bool = False


class PortalUser(BaseModel):
    id: int
    name: str = ""
    email: str | None = None
    role: str | None = None


class Project(BaseModel):
    id: int
    name: str
    status: str | None = None
    owner_name: str | None = None
    description: str | None = None


class Forum(BaseModel):
    id: int
    name: str = ""
    content: str | None = None
    is_sticky_post: bool = False
    is_announcement_post: bool = False
    posted_by: str | None = None
    posted_person: str | None = None
    post_date: str | None = None


class ForumComment(BaseModel):
    id: int
    content: str = ""
    comment_type: str | None = Field(default=None, alias="type")
    level: str | None = None
    parent_id: str | None = None
    root_id: str | None = None
    posted_by: str | None = None
    posted_person: str | None = None
    post_date: str | None = None
    is_best_answer: bool = False


class Event(BaseModel):
    id: int
    title: str = ""
    location: str | None = None
    scheduled_on: str | None = None
    reminder: str | None = None
    repeat: str | None = None
    duration_hour: str | None = None
    duration_minutes: str | None = None
    is_open: bool = True


class Activity(BaseModel):
    id: int
    name: str = ""
    state: str | None = None
    activity_for: str | None = None
    activity_by: str | None = None
    display_time: str | None = None


class Status(BaseModel):
    id: int
    content: str = ""
    posted_by: str | None = None
    posted_person: str | None = None
    posted_time: str | None = None


class TokenResponse(BaseModel):
    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int = 3600
    expires_in_sec: int | None = None
    api_domain: str | None = None
    token_type: str | None = None
    error: str | None = None

    def lifetime_seconds(self) -> int:
        if self.expires_in_sec is not None:
            return self.expires_in_sec
        return self.expires_in
