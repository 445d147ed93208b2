"""
Unit tests for TaskRegistry.

Tests registration, lookup, discovery listing and graph validation.
"""

import pytest

from muxops.core.exceptions import CyclicDependencyError, DuplicateTaskError, UnknownTaskError
from muxops.core.models.task import Task
from muxops.services.tasks import TaskRegistry


class TestRegistration:
    """Tests for register/get."""

    def test_register_and_get(self):
        registry = TaskRegistry()
        task = registry.register(Task("build", description="Build it"))

        assert registry.get("build") is task
        assert "build" in registry
        assert len(registry) == 1

    def test_duplicate_name_rejected(self):
        """A second task with the same name raises and keeps the first."""
        registry = TaskRegistry([Task("build", description="first")])

        with pytest.raises(DuplicateTaskError) as exc_info:
            registry.register(Task("build", description="second"))

        assert exc_info.value.name == "build"
        assert registry.get("build").description == "first"

    def test_get_unknown_task(self):
        registry = TaskRegistry()

        with pytest.raises(UnknownTaskError, match="deploy"):
            registry.get("deploy")

    def test_task_name_must_not_contain_whitespace(self):
        with pytest.raises(ValueError):
            Task("two words")


class TestListing:
    """Tests for the discovery listing."""

    def test_list_is_sorted_and_skips_internal_tasks(self):
        registry = TaskRegistry(
            [
                Task("up", description="Start system"),
                Task("clean-proto"),
                Task("deps", description="Install dependencies"),
                Task("clean", description="Clean everything", prerequisites=["clean-proto"]),
            ]
        )

        assert registry.list() == [
            ("clean", "Clean everything"),
            ("deps", "Install dependencies"),
            ("up", "Start system"),
        ]

    def test_list_empty_registry(self):
        assert TaskRegistry().list() == []


class TestValidation:
    """Tests for validate()."""

    def test_valid_graph(self):
        registry = TaskRegistry(
            [
                Task("a"),
                Task("b", prerequisites=["a"]),
                Task("c", prerequisites=["a", "b"]),
            ]
        )

        registry.validate()

    def test_missing_prerequisite_names_both_tasks(self):
        registry = TaskRegistry([Task("test", prerequisites=["test-gateway"])])

        with pytest.raises(UnknownTaskError) as exc_info:
            registry.validate()

        assert exc_info.value.name == "test-gateway"
        assert exc_info.value.required_by == "test"

    def test_cycle_detected(self):
        registry = TaskRegistry(
            [
                Task("a", prerequisites=["b"]),
                Task("b", prerequisites=["c"]),
                Task("c", prerequisites=["a"]),
            ]
        )

        with pytest.raises(CyclicDependencyError) as exc_info:
            registry.validate()

        cycle = exc_info.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"a", "b", "c"}

    def test_self_dependency_is_a_cycle(self):
        registry = TaskRegistry([Task("a", prerequisites=["a"])])

        with pytest.raises(CyclicDependencyError):
            registry.validate()
