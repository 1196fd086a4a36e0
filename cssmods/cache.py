# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Per-build resolution cache.

Maps a module key to the task loading that module. The task is stored before
the caller can await anything, so every concurrent request for the same key
during a build shares one load: diamond-shaped import graphs parse and link
each module exactly once, and re-entrant requests see the pending task
instead of starting a second load.

There is no cycle detection. If A imports B and B imports A, each load waits
on the other's task and neither completes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Generic, TypeVar

from cssmods.module_ref import ModuleRef

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResolutionCache(Generic[T]):
	def __init__(self) -> None:
		self._entries: Dict[str, "asyncio.Future[T]"] = {}
		self.started = 0
		self.hits = 0

	def reset(self) -> None:
		"""Forget everything; called at the start of each build."""
		self._entries = {}
		self.started = 0
		self.hits = 0

	def __contains__(self, ref: ModuleRef) -> bool:
		return ref.key in self._entries

	def __len__(self) -> int:
		return len(self._entries)

	def resolve(self, ref: ModuleRef, load: Callable[[], Awaitable[T]]) -> "asyncio.Future[T]":
		"""
		Return the (possibly pending) load for `ref`, starting it on first use.

		Must be called from a running event loop. The returned future is shared:
		awaiting it more than once is fine.
		"""
		key = ref.key
		entry = self._entries.get(key)
		if entry is not None:
			self.hits += 1
			logger.debug("resolution cache hit: %s", key)
			return entry
		entry = asyncio.ensure_future(load())
		self._entries[key] = entry
		self.started += 1
		logger.debug("resolution cache miss, loading: %s", key)
		return entry


__all__ = ["ResolutionCache"]
