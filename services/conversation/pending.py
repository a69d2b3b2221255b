"""Track outstanding inference calls so they can time out or be cancelled."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Dict, Hashable, Optional

from models.errors import RequestCancelled, RequestTimedOut


class PendingRequests:
	"""Registry of in-flight calls, each with its own cancellation token."""

	def __init__(self) -> None:
		self._tokens: Dict[Hashable, asyncio.Event] = {}

	def __contains__(self, key: Hashable) -> bool:
		return key in self._tokens

	def __len__(self) -> int:
		return len(self._tokens)

	async def run(self, key: Hashable, call: Awaitable[Any], timeout: Optional[float] = None) -> Any:
		"""Await `call` under `key`, bounded by `timeout` seconds.

		Raises:
			RequestCancelled: `cancel(key)` was called before the call settled.
			RequestTimedOut: the call did not settle within `timeout`.
		"""
		if key in self._tokens:
			if asyncio.iscoroutine(call):
				call.close()
			raise ValueError(f"A request is already pending for {key!r}.")
		token = asyncio.Event()
		self._tokens[key] = token
		task = asyncio.ensure_future(call)
		waiter = asyncio.ensure_future(token.wait())
		try:
			done, _ = await asyncio.wait({task, waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
		except asyncio.CancelledError:
			task.cancel()
			raise
		finally:
			waiter.cancel()
			self._tokens.pop(key, None)

		if task in done:
			return task.result()
		task.cancel()
		if token.is_set():
			raise RequestCancelled(f"Request {key!r} was cancelled.")
		raise RequestTimedOut(f"Request {key!r} timed out after {timeout} seconds.")

	def cancel(self, key: Hashable) -> bool:
		"""Signal cancellation for `key`; return False when nothing is pending."""
		token = self._tokens.get(key)
		if token is None:
			return False
		token.set()
		return True

	def cancel_all(self) -> int:
		"""Cancel every outstanding request and return how many were signalled."""
		keys = list(self._tokens)
		for key in keys:
			self._tokens[key].set()
		return len(keys)
