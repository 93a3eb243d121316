"""Milestone store implementations."""

from .memory import InMemoryMilestoneStore
from .yaml_file import YamlFileStore

__all__ = ["InMemoryMilestoneStore", "YamlFileStore"]
