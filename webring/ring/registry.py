"""Member list loader — parses members.yaml into typed Member records.

The file is read once at startup. Unlike most configuration in this
service, a broken member list is fatal: the ring cannot be served
without it.

Format::

    users:
      - id: alice
        name: Alice's Site
        url: https://alice.example.com
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .models import Member

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "name", "url")


class MemberConfigError(ValueError):
    """Raised when the member list cannot be loaded."""


def load_members(path: Path) -> list[Member]:
    """Read and validate the member file at ``path``."""
    if not path.exists():
        raise MemberConfigError(f"Member file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise MemberConfigError(f"Failed to parse {path}: {e}") from e

    members = parse_members(raw)
    logger.info("Loaded %d members from %s", len(members), path)
    return members


def parse_members(raw: Any) -> list[Member]:
    """Validate an already-decoded member document."""
    if not isinstance(raw, dict):
        raise MemberConfigError("Member file must be a mapping with a 'users' list")

    entries = raw.get("users")
    if not isinstance(entries, list):
        raise MemberConfigError("'users' must be a list")
    if not entries:
        raise MemberConfigError("Member list is empty")

    members: list[Member] = []
    seen: set[str] = set()
    for i, entry in enumerate(entries):
        member = _parse_member(entry, i)
        if member.id in seen:
            raise MemberConfigError(f"Duplicate member id: {member.id}")
        seen.add(member.id)
        members.append(member)
    return members


def _parse_member(entry: Any, index: int) -> Member:
    if not isinstance(entry, dict):
        raise MemberConfigError(f"Member #{index} is not a mapping")

    values = {}
    for key in REQUIRED_FIELDS:
        value = entry.get(key)
        if value is None or not str(value).strip():
            raise MemberConfigError(f"Member #{index} is missing '{key}'")
        values[key] = str(value).strip()

    return Member(id=values["id"], name=values["name"], url=values["url"])
