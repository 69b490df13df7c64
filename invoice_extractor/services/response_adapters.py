"""
Adapters that turn a model's free-text reply into parsed JSON.

Providers wrap their JSON differently (Gemini tends to answer inside a
markdown code fence), so the parsing step is swappable per provider.
"""

import json
import re
from abc import ABC, abstractmethod

_FENCE = re.compile(r"^```(?:json)?[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL | re.IGNORECASE)


class ResponseAdapter(ABC):
    @abstractmethod
    def parse(self, text: str):
        """Return the JSON value carried by `text`; raise ValueError if there is none."""
        pass


class PlainJsonAdapter(ResponseAdapter):
    """Reply is bare JSON."""

    def parse(self, text: str):
        return json.loads(text.strip())


class FencedJsonAdapter(ResponseAdapter):
    """
    Reply is JSON, optionally wrapped in a ``` or ```json fence.

    Example:
        ```json
        {"invoiceNumber": "INV-1"}
        ```
    """

    def strip_fence(self, text: str) -> str:
        stripped = text.strip()
        match = _FENCE.match(stripped)
        if match:
            return match.group(1).strip()
        return stripped

    def parse(self, text: str):
        return json.loads(self.strip_fence(text))
