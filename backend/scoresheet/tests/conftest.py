import pytest

from scoresheet.logic.session import GameSession


@pytest.fixture
def three_player_session() -> GameSession:
    session = GameSession("session-3p", actor_id="user-1")
    session.start(["Alice", "Bob", "Carol"])
    return session


@pytest.fixture
def four_player_session() -> GameSession:
    session = GameSession("session-4p", actor_id="user-1")
    session.start(["Alice", "Bob", "Carol", "Dave"])
    return session
