# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shared primitives: source spans and source maps."""

__all__ = ["sourcemap", "span"]
