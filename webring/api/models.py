"""Pydantic response models for the ring API."""

from __future__ import annotations

from pydantic import BaseModel

from ..ring.models import Member


class MemberOut(BaseModel):
    id: str
    name: str
    url: str

    @classmethod
    def from_member(cls, member: Member) -> "MemberOut":
        return cls(id=member.id, name=member.name, url=member.url)


class MemberDetail(BaseModel):
    prev: MemberOut | None
    member: MemberOut
    next: MemberOut | None
