"""
Connection Picker
-----------------
Autocomplete prompt over the connection registry, built on prompt_toolkit.

The resolver only sees a callable:

    picker(message, source) -> Optional[str]

where source(fragment) returns candidates with `label` and `key`.
None means the user closed the prompt (Ctrl-D).
"""

from typing import Callable, Iterable, List, Optional, Protocol

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document


class CandidateLike(Protocol):
    label: str
    key: str


Source = Callable[[str], List[CandidateLike]]


class CandidateCompleter(Completer):
    """Autocomplete connection names while typing."""

    def __init__(self, source: Source):
        self._source = source

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        for candidate in self._source(text.strip()):
            yield Completion(
                candidate.key,
                start_position=-len(text),
                display=candidate.label,
            )


def pick_value(text: str, source: Source) -> str:
    """
    Turn the accepted prompt text into a connection name.

    An exact name wins. Otherwise the first candidate for the text is
    taken, the same entry the menu highlights. With no candidates the
    text is returned as typed and the resolver reports it as a miss.
    """
    text = text.strip()
    candidates = source(text)

    for candidate in candidates:
        if candidate.key == text:
            return candidate.key

    if candidates:
        return candidates[0].key

    return text


class ConnectionPicker:
    """Interactive picker used for both the menu and the retry prompt."""

    def __init__(self, session_factory: Callable[..., PromptSession] = PromptSession):
        self._session_factory = session_factory

    def __call__(self, message: str, source: Source) -> Optional[str]:
        session = self._session_factory(
            completer=CandidateCompleter(source),
            complete_while_typing=True,
            reserve_space_for_menu=10,
        )

        try:
            text = session.prompt(
                f"{message} ",
                pre_run=lambda: session.default_buffer.start_completion(select_first=False),
            )
        except EOFError:
            return None

        return pick_value(text, source)
