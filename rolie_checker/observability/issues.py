"""
Issue sinks for scan diagnostics.

Every concern the checker reports on (provider metadata, ROLIE feeds, the
ROLIE service document, ...) gets its own IssueSink. Sinks are plain
objects handed to the components that need them, so tests can inspect
exactly what was reported.

Design decisions:
- A sink only collects messages; reporting never alters control flow
- Messages are mirrored to the module logger at the matching level
- Each sink is tied to the number of the CSAF 2.0 requirement it checks,
  which the reporter uses for ordering and headings
- A sink that was never "used" is reported as not checked rather than
  passed
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

logger = logging.getLogger(__name__)


class MessageType(Enum):
    """Severity of a diagnostic."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


_LOG_LEVELS = {
    MessageType.INFO: logging.INFO,
    MessageType.WARN: logging.WARNING,
    MessageType.ERROR: logging.ERROR,
}


@dataclass
class Message:
    type: MessageType
    text: str


@dataclass
class IssueSink:
    """
    Collects diagnostics for one requirement.

    Attributes:
        requirement: CSAF 2.0 requirement number
        description: Short requirement title used in reports
        used: True once a check for this requirement has run
        messages: Diagnostics in the order they were reported
    """
    requirement: int
    description: str
    used: bool = False
    messages: List[Message] = field(default_factory=list)

    def use(self) -> None:
        """Mark the requirement as checked."""
        self.used = True

    def add(self, message_type: MessageType, text: str) -> None:
        self.used = True
        self.messages.append(Message(message_type, text))
        logger.log(_LOG_LEVELS[message_type], "[%s] %s", self.description, text)

    def info(self, text: str) -> None:
        self.add(MessageType.INFO, text)

    def warn(self, text: str) -> None:
        self.add(MessageType.WARN, text)

    def error(self, text: str) -> None:
        self.add(MessageType.ERROR, text)

    def has_errors(self) -> bool:
        return any(m.type is MessageType.ERROR for m in self.messages)

    def texts(self, message_type: MessageType) -> List[str]:
        """Return the texts of all messages of one severity."""
        return [m.text for m in self.messages if m.type is message_type]

    def counts(self) -> Dict[str, int]:
        counts = {t.value: 0 for t in MessageType}
        for message in self.messages:
            counts[message.type.value] += 1
        return counts


class Issues:
    """The set of sinks a scan reports into."""

    def __init__(self):
        self.invalid_advisories = IssueSink(1, "Valid CSAF documents")
        self.bad_filenames = IssueSink(2, "Filename")
        self.tls = IssueSink(3, "TLS")
        self.provider_metadata = IssueSink(7, "provider-metadata.json")
        self.bad_folders = IssueSink(11, "One folder per year")
        self.rolie_feed = IssueSink(15, "ROLIE feed")
        self.rolie_service = IssueSink(16, "ROLIE service document")

    def all(self) -> List[IssueSink]:
        """Return all sinks ordered by requirement number."""
        sinks = [value for value in vars(self).values() if isinstance(value, IssueSink)]
        return sorted(sinks, key=lambda sink: sink.requirement)

    def has_errors(self) -> bool:
        return any(sink.has_errors() for sink in self.all())
