"""
Picker Tests
------------
prompt_toolkit completer and selection rules, without a terminal.
"""

from functools import partial

import pytest
from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document

from connections.matcher import match
from infra.picker import CandidateCompleter, ConnectionPicker, pick_value


@pytest.fixture
def source(registry):
    return partial(match, registry)


class TestCandidateCompleter:

    def _complete(self, source, text):
        completer = CandidateCompleter(source)
        return list(completer.get_completions(Document(text), CompleteEvent()))

    def test_empty_input_lists_everything(self, source, registry):
        completions = self._complete(source, "")

        assert [c.text for c in completions] == registry.names()

    def test_filters_and_replaces_typed_text(self, source):
        completions = self._complete(source, "prod")

        assert [c.text for c in completions] == ["prod", "Prod-DB"]
        assert all(c.start_position == -4 for c in completions)

    def test_display_shows_command(self, source):
        (completion,) = self._complete(source, "local")

        assert completion.display_text == "local → bash -l"


class TestPickValue:

    def test_exact_key(self, source):
        assert pick_value("prod", source) == "prod"

    def test_exact_key_beats_first_candidate(self, source):
        assert pick_value("Prod-DB", source) == "Prod-DB"

    def test_partial_takes_first_candidate(self, source):
        assert pick_value("stag", source) == "staging"

    def test_strips_whitespace(self, source):
        assert pick_value("  local ", source) == "local"

    def test_unknown_text_returned_as_typed(self, source):
        assert pick_value("ghost", source) == "ghost"

    def test_empty_text_takes_first(self, source, registry):
        assert pick_value("", source) == registry.names()[0]


class FakeSession:
    """Stands in for PromptSession; returns scripted input."""

    def __init__(self, reply=None, error=None, **kwargs):
        self.kwargs = kwargs
        self.reply = reply
        self.error = error
        self.messages = []

    def prompt(self, message, **kwargs):
        self.messages.append(message)
        if self.error is not None:
            raise self.error
        return self.reply


class TestConnectionPicker:

    def test_returns_selected_key(self, source):
        sessions = []

        def factory(**kwargs):
            session = FakeSession(reply="stag", **kwargs)
            sessions.append(session)
            return session

        picker = ConnectionPicker(session_factory=factory)

        assert picker("Select:", source) == "staging"
        assert sessions[0].messages == ["Select: "]
        assert isinstance(sessions[0].kwargs["completer"], CandidateCompleter)
        assert sessions[0].kwargs["complete_while_typing"] is True

    def test_eof_cancels(self, source):
        picker = ConnectionPicker(session_factory=lambda **kw: FakeSession(error=EOFError()))

        assert picker("Select:", source) is None

    def test_ctrl_c_propagates(self, source):
        picker = ConnectionPicker(
            session_factory=lambda **kw: FakeSession(error=KeyboardInterrupt())
        )

        with pytest.raises(KeyboardInterrupt):
            picker("Select:", source)
