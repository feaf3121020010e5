"""Chat completion client stand-in passed through ``client=`` seams.

Production code only touches ``client.chat.completions.create(**params)`` and
reads ``response.choices[0].message.content``; the stub records the keyword
arguments and answers from a queue.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional


def completion(content: Optional[str]) -> SimpleNamespace:
    """Build a response object carrying one choice with ``content``."""

    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class ChatClientStub:
    """Records ``chat.completions.create`` calls and replays queued replies."""

    def __init__(
        self,
        *responses: str,
        side_effect: Optional[Callable[[Dict[str, Any]], Any]] = None,
    ) -> None:
        self.side_effect = side_effect
        self.calls: List[Dict[str, Any]] = []
        self.responses: List[str] = list(responses)
        self.chat = SimpleNamespace(
            completions=SimpleNamespace(create=self._create_completion)
        )

    def queue_response(self, content: str) -> None:
        self.responses.append(content)

    @property
    def last_call(self) -> Dict[str, Any]:
        return self.calls[-1]

    def _create_completion(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.side_effect:
            result = self.side_effect(kwargs)
            if result is not None:
                return result
        return completion(self.responses.pop(0) if self.responses else "")
