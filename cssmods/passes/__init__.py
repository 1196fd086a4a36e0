# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Tree passes run by the Processor, in pipeline order:

  values -> local_by_default -> extract_imports -> scope -> link_modules
"""

from cssmods.passes.extract_imports import extract_imports
from cssmods.passes.link_modules import link_modules
from cssmods.passes.local_by_default import local_by_default
from cssmods.passes.scope import scope
from cssmods.passes.values import values

__all__ = ["extract_imports", "link_modules", "local_by_default", "scope", "values"]
