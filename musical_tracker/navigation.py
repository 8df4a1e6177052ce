"""
Client navigation state.

The client renders exactly one section at a time. Switching is synchronous;
admin-only sections are never entered by non-admin callers, who land on the
access-denied section instead.
"""

from enum import Enum
from typing import Optional


class Section(str, Enum):
    HOME = 'home'
    MUSICALS = 'musicals'
    ACTORS = 'actors'
    THEATERS = 'theaters'
    PERFORMANCES = 'performances'
    CASTINGS = 'castings'
    PRODUCTIONS = 'productions'
    PROFILE = 'profile'
    ADMIN = 'admin'
    PENDING = 'pending'
    ACCESS_DENIED = 'access_denied'


ADMIN_SECTIONS = frozenset({Section.ADMIN, Section.PENDING})
AUTHENTICATED_SECTIONS = frozenset({Section.PROFILE})


def can_access(section: Section, identity=None) -> bool:
    if section in ADMIN_SECTIONS:
        return identity is not None and identity.is_admin
    if section in AUTHENTICATED_SECTIONS:
        return identity is not None
    return True


def available_sections(identity=None) -> list[Section]:
    """Sections the caller may open, in menu order."""
    return [
        section for section in Section
        if section is not Section.ACCESS_DENIED and can_access(section, identity)
    ]


class NavigationState:
    """Holds the active section for one client session."""

    def __init__(self, identity=None, active: Section = Section.HOME):
        self.identity = identity
        self.active = active

    def activate(self, section, identity: Optional[object] = None) -> Section:
        section = Section(section)
        caller = identity if identity is not None else self.identity
        self.active = section if can_access(section, caller) else Section.ACCESS_DENIED
        return self.active

    @property
    def denied(self) -> bool:
        return self.active is Section.ACCESS_DENIED
