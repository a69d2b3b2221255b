"""Append-only in-memory conversation log."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from models.conversation import Message

SeedEntry = Tuple[str, bool, str]


def format_timestamp(moment: datetime) -> str:
	"""Format a wall-clock time as en-US hour:minute, e.g. `9:05 AM`."""
	hour = moment.hour % 12 or 12
	suffix = "AM" if moment.hour < 12 else "PM"
	return f"{hour}:{moment.minute:02d} {suffix}"


class ConversationLog:
	"""Own the ordered message sequence and hand out ids.

	Ids come from an internal counter, so two appends racing from different
	paths never share an id even if they land in the same tick.
	"""

	def __init__(
		self,
		seed: Optional[Iterable[SeedEntry]] = None,
		clock: Callable[[], datetime] = datetime.now,
	) -> None:
		self._messages: List[Message] = []
		self._next_id = 1
		self._clock = clock
		for text, is_user, timestamp in seed or ():
			self._store(text, is_user, timestamp)

	def append(self, text: str, *, is_user: bool) -> Message:
		"""Create a message stamped with the current time and add it to the log."""
		return self._store(text, is_user, format_timestamp(self._clock()))

	def _store(self, text: str, is_user: bool, timestamp: str) -> Message:
		message = Message(id=self._next_id, text=text, is_user=is_user, timestamp=timestamp)
		self._next_id += 1
		self._messages.append(message)
		return message

	@property
	def messages(self) -> Sequence[Message]:
		return tuple(self._messages)

	@property
	def last(self) -> Optional[Message]:
		return self._messages[-1] if self._messages else None

	def __len__(self) -> int:
		return len(self._messages)

	def __iter__(self) -> Iterator[Message]:
		return iter(tuple(self._messages))
