# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import asyncio

import pytest

from cssmods.cache import ResolutionCache
from cssmods.module_ref import FilePath, OpaqueHandle, VirtualName


def test_concurrent_requests_share_one_load() -> None:
	started: list[str] = []

	async def scenario():
		cache: ResolutionCache[str] = ResolutionCache()
		gate = asyncio.Event()

		async def load() -> str:
			started.append("a")
			await gate.wait()
			return "module-a"

		first = cache.resolve(FilePath("/in/a.css"), load)
		second = cache.resolve(FilePath("/in/a.css"), load)
		assert first is second
		gate.set()
		results = await asyncio.gather(first, second, cache.resolve(FilePath("/in/a.css"), load))
		return cache, results

	cache, results = asyncio.run(scenario())
	assert results == ["module-a", "module-a", "module-a"]
	assert started == ["a"]
	assert (cache.started, cache.hits) == (1, 2)


def test_entry_is_visible_before_the_load_runs() -> None:
	async def scenario():
		cache: ResolutionCache[int] = ResolutionCache()

		async def load() -> int:
			return 1

		ref = FilePath("/in/a.css")
		fut = cache.resolve(ref, load)
		assert ref in cache
		assert not fut.done()
		return await fut

	assert asyncio.run(scenario()) == 1


def test_refs_with_the_same_key_share_an_entry() -> None:
	class Handle:
		def __str__(self) -> str:
			return "/in/a.css"

	async def scenario():
		cache: ResolutionCache[str] = ResolutionCache()

		async def load() -> str:
			return "x"

		a = cache.resolve(FilePath("/in/a.css"), load)
		b = cache.resolve(OpaqueHandle(Handle()), load)
		c = cache.resolve(VirtualName("/in/a.css"), load)
		await asyncio.gather(a, b, c)
		return cache, a is b, a is c

	cache, same_file, same_virtual = asyncio.run(scenario())
	assert same_file
	assert not same_virtual
	assert len(cache) == 2


def test_failures_are_shared_and_reset_clears() -> None:
	async def scenario():
		cache: ResolutionCache[str] = ResolutionCache()
		calls = 0

		async def load() -> str:
			nonlocal calls
			calls += 1
			raise FileNotFoundError("gone")

		ref = FilePath("/in/missing.css")
		for _ in range(2):
			with pytest.raises(FileNotFoundError):
				await cache.resolve(ref, load)
		assert calls == 1
		cache.reset()
		assert len(cache) == 0 and cache.started == 0
		with pytest.raises(FileNotFoundError):
			await cache.resolve(ref, load)
		return calls

	assert asyncio.run(scenario()) == 2
