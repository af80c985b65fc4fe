"""
Tests for the Streamlit frontend, driven through streamlit's AppTest.
"""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP_PATH = str(Path(__file__).resolve().parents[1] / "app" / "main.py")


@pytest.fixture
def app():
    at = AppTest.from_file(APP_PATH)
    at.run()
    return at


def add_person(at, name):
    at.text_input[0].input(name)
    at.button[0].click()
    at.run()


class TestPeopleStep:
    """Tests for the participants step."""

    def test_starts_on_people_step(self, app):
        assert not app.exception
        assert "Step 1 of 5" in app.caption[0].value

    def test_blank_name_shows_error(self, app):
        """Test a blank submission is reported like any other rejection."""
        add_person(app, "   ")

        assert not app.exception
        assert any("Name is required" in error.value for error in app.error)
        assert app.session_state.split_session.people == []

    def test_duplicate_name_shows_error(self, app):
        add_person(app, "Alice")
        add_person(app, "alice")

        assert any("already been added" in error.value for error in app.error)
        assert len(app.session_state.split_session.people) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
