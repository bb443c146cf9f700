"""Data models shared by the session, the repository tree and the gateway."""

import time
import uuid
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from atlas.agents import Agent


def _now_millis() -> int:
    return int(time.time() * 1000)


class Message(BaseModel):
    """A single chat message.

    Only the open assistant placeholder ever gets its content replaced, and
    always through a new snapshot with the same id.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "assistant"]
    content: str = ""
    agent: Optional[Agent] = None
    timestamp: int = Field(default_factory=_now_millis)
    error: bool = Field(False, description="True for user-visible failure reports")


class FileNode(BaseModel):
    """A file or directory in the repository forest. Path is the identity."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    kind: Literal["file", "directory"]
    children: Optional[tuple["FileNode", ...]] = None
    content: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, data: Any) -> Any:
        # children only on directories, content only on files
        if isinstance(data, dict):
            data = dict(data)
            if data.get("kind") == "directory":
                data["content"] = None
                if data.get("children") is None:
                    data["children"] = ()
            else:
                data["children"] = None
        return data

    @property
    def is_dir(self) -> bool:
        return self.kind == "directory"


FileNode.model_rebuild()


class RemoteEntry(BaseModel):
    """Unchecked structure entry as reported by repository analysis."""

    name: Optional[str] = None
    path: Optional[str] = None
    type: Optional[str] = Field(None, validation_alias=AliasChoices("type", "kind"))
    children: Optional[list["RemoteEntry"]] = None


RemoteEntry.model_rebuild()


class RepoAnalysis(BaseModel):
    """Result of analyzing a remote repository. Every field has a default."""

    name: Optional[str] = Field(None, validation_alias=AliasChoices("name", "repoName"))
    summary: str = ""
    stack: list[str] = Field(default_factory=list)
    structure: list[RemoteEntry] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("stack", "structure", mode="before")
    @classmethod
    def _list_default(cls, value: Any) -> Any:
        return [] if value is None else value
