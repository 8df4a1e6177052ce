import pytest

from musical_tracker.api_modules.auth import Identity
from musical_tracker.navigation import NavigationState, Section, available_sections

ADMIN = Identity(id=1, role="admin")
USER = Identity(id=2, role="user")


def test_starts_on_home():
    assert NavigationState().active is Section.HOME


def test_switching_is_immediate():
    state = NavigationState(USER)
    assert state.activate(Section.MUSICALS) is Section.MUSICALS
    assert state.activate("castings") is Section.CASTINGS
    assert state.active is Section.CASTINGS


@pytest.mark.parametrize("section", [Section.ADMIN, Section.PENDING])
def test_admin_sections_are_denied_to_users(section):
    state = NavigationState(USER)
    state.activate(section)
    assert state.active is Section.ACCESS_DENIED
    assert state.denied


def test_admin_may_open_admin_sections():
    state = NavigationState(ADMIN)
    assert state.activate(Section.PENDING) is Section.PENDING


def test_identity_can_be_given_per_call():
    state = NavigationState()
    assert state.activate(Section.ADMIN) is Section.ACCESS_DENIED
    assert state.activate(Section.ADMIN, ADMIN) is Section.ADMIN


def test_unknown_section_is_rejected():
    with pytest.raises(ValueError):
        NavigationState().activate("backstage")


def test_available_sections():
    anonymous = available_sections(None)
    assert Section.PROFILE not in anonymous
    assert Section.ADMIN not in anonymous
    assert Section.PROFILE in available_sections(USER)
    assert Section.PENDING in available_sections(ADMIN)
    assert Section.ACCESS_DENIED not in available_sections(ADMIN)
