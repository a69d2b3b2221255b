"""Conversation domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Message:
	"""A single entry in the conversation thread."""

	id: int
	text: str
	is_user: bool
	timestamp: str


@dataclass(frozen=True)
class UploadedFile:
	"""A file the user picked for upload.

	`data` holds the raw bytes when they are already in memory; otherwise
	`path` points at a file that is read asynchronously when needed.
	"""

	name: str
	media_type: str
	data: Optional[bytes] = None
	path: Optional[str] = None
