"""Tests for the typed exception hierarchy.

Validates:
- Class hierarchy is correct (isinstance checks)
- Context payloads survive construction
- The package root re-exports the base error
"""

from __future__ import annotations

import pytest

# ---------------------------------------------------------------------------
# Hierarchy tests (no I/O)
# ---------------------------------------------------------------------------


class TestExceptionHierarchy:
    """Verify the class hierarchy defined in core/exceptions.py."""

    def test_base_error_is_exception(self):
        from mindmap_explorer.core.exceptions import MindmapExplorerError

        err = MindmapExplorerError("base")
        assert isinstance(err, Exception)

    @pytest.mark.parametrize(
        "name",
        [
            "DatasetLoadError",
            "MalformedHierarchyError",
            "HierarchyError",
            "ExplorerNotReadyError",
            "ConfigError",
        ],
    )
    def test_top_level_errors_inherit_from_base(self, name):
        from mindmap_explorer.core import exceptions

        err = getattr(exceptions, name)("boom")
        assert isinstance(err, exceptions.MindmapExplorerError)

    def test_cyclic_and_duplicate_are_malformed(self):
        from mindmap_explorer.core.exceptions import (
            CyclicHierarchyError,
            DuplicateIdentityError,
            MalformedHierarchyError,
        )

        assert isinstance(CyclicHierarchyError("c"), MalformedHierarchyError)
        assert isinstance(DuplicateIdentityError("d"), MalformedHierarchyError)

    def test_unknown_node_is_hierarchy_error_and_key_error(self):
        from mindmap_explorer.core.exceptions import HierarchyError, UnknownNodeError

        err = UnknownNodeError("Unknown node 42")
        assert isinstance(err, HierarchyError)
        assert isinstance(err, KeyError)

    def test_unknown_node_str_is_plain_message(self):
        from mindmap_explorer.core.exceptions import UnknownNodeError

        assert str(UnknownNodeError("Unknown node 42")) == "Unknown node 42"

    def test_root_collapse_is_hierarchy_error(self):
        from mindmap_explorer.core.exceptions import HierarchyError, RootCollapseError

        assert isinstance(RootCollapseError("root"), HierarchyError)

    def test_loading_errors_are_not_hierarchy_errors(self):
        from mindmap_explorer.core.exceptions import DatasetLoadError, HierarchyError

        assert not isinstance(DatasetLoadError("x"), HierarchyError)


# ---------------------------------------------------------------------------
# Context payload
# ---------------------------------------------------------------------------


class TestErrorContext:
    def test_context_defaults_to_empty_dict(self):
        from mindmap_explorer.core.exceptions import ConfigError

        assert ConfigError("bad").context == {}

    def test_context_is_kept(self):
        from mindmap_explorer.core.exceptions import DatasetLoadError

        err = DatasetLoadError("missing", context={"url": "data/x.json"})
        assert err.context["url"] == "data/x.json"
        assert str(err) == "missing"


class TestPackageExports:
    def test_base_error_exported_from_package_root(self):
        import mindmap_explorer
        from mindmap_explorer.core.exceptions import MindmapExplorerError

        assert mindmap_explorer.MindmapExplorerError is MindmapExplorerError

    def test_core_exports_every_error(self):
        from mindmap_explorer import core

        for name in (
            "CyclicHierarchyError",
            "DuplicateIdentityError",
            "RootCollapseError",
            "UnknownNodeError",
        ):
            assert name in core.__all__
