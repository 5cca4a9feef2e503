"""Tests for the feature-flag holder."""

import pytest

from application.feature_flags import FeatureFlags, FeatureFlagSnapshot, normalize_flag_name
from domain.exceptions import UnknownFlagError


def test_defaults():
    assert FeatureFlags().as_dict() == {
        "hosted_search": True,
        "sandboxed_execution": True,
        "document_retrieval": False,
        "structured_output": False,
        "remote_device_control": False,
    }


@pytest.mark.parametrize("name", [
    "hosted_search", "sandboxed_execution", "document_retrieval",
    "structured_output", "remote_device_control",
])
def test_double_toggle_restores_value(name):
    flags = FeatureFlags()
    before = flags.is_enabled(name)
    flags.toggle(name)
    assert flags.is_enabled(name) is not before
    flags.toggle(name)
    assert flags.is_enabled(name) is before


def test_kebab_case_names():
    flags = FeatureFlags()
    flags.enable("structured-output")
    assert flags.snapshot().structured_output is True
    assert normalize_flag_name("Remote-Device-Control") == "remote_device_control"


def test_unknown_flag():
    with pytest.raises(UnknownFlagError):
        FeatureFlags().toggle("teleportation")


def test_snapshot_is_isolated_from_later_changes():
    flags = FeatureFlags()
    snapshot = flags.snapshot()
    flags.disable("hosted_search")
    assert snapshot.hosted_search is True
    assert flags.snapshot().hosted_search is False


def test_update_accepts_mapping_and_kwargs():
    flags = FeatureFlags()
    current = flags.update({"hosted-search": False}, structured_output=True)
    assert current.hosted_search is False
    assert current.structured_output is True


def test_builtin_tools_group():
    flags = FeatureFlags(FeatureFlagSnapshot(document_retrieval=False))
    flags.disable("builtin-tools")
    snap = flags.snapshot()
    assert not (snap.hosted_search or snap.sandboxed_execution or snap.document_retrieval)

    # partially enabled group toggles on, then off again
    flags.enable("hosted_search")
    flags.toggle("builtin-tools")
    assert flags.is_enabled("builtin-tools")
    flags.toggle("builtin-tools")
    assert not flags.snapshot().hosted_search


def test_initial_snapshot_is_used():
    flags = FeatureFlags(FeatureFlagSnapshot(hosted_search=False))
    assert flags.is_enabled("hosted_search") is False
