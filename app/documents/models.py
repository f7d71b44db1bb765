from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

BlockType = Literal["header", "section", "text"]


class ResumeBlock(BaseModel):
    type: BlockType
    content: str
    children: list["ResumeBlock"] = Field(default_factory=list)

    @classmethod
    def header(cls, content: str) -> "ResumeBlock":
        return cls(type="header", content=content)

    @classmethod
    def section(cls, content: str, children: list["ResumeBlock"] | None = None) -> "ResumeBlock":
        return cls(type="section", content=content, children=list(children or []))

    @classmethod
    def text(cls, content: str) -> "ResumeBlock":
        return cls(type="text", content=content)


MarkupKind = Literal["heading", "subheading", "emphasis", "bullet", "break", "paragraph"]


class MarkupLine(BaseModel):
    kind: MarkupKind
    text: str = ""
