"""Transitive package closure tests."""

from __future__ import annotations

from csprojgraph.parsers.nuget.assets import NugetDependency
from csprojgraph.parsers.nuget.closure import (
    POLICY_FIRST,
    POLICY_HIGHEST,
    expand_package_closure,
)


def _records() -> list:
    return [
        NugetDependency("P", "1.0.0", {"Q": "2.0.0"}),
        NugetDependency("Q", "2.0.0", {"R": "3.0.0"}),
    ]


def test_transitive_dependencies_are_added() -> None:
    refs = {"P": "1.0.0"}

    result = expand_package_closure(refs, _records())

    assert refs == {"P": "1.0.0", "Q": "2.0.0", "R": "3.0.0"}
    assert result.added == ["Q", "R"]
    assert result.iterations == 2


def test_empty_package_set_terminates_after_zero_iterations() -> None:
    refs: dict = {}

    result = expand_package_closure(refs, _records())

    assert refs == {}
    assert result.iterations == 0
    assert not result.changed


def test_closure_is_idempotent() -> None:
    refs = {"P": "1.0.0"}
    expand_package_closure(refs, _records())
    snapshot = dict(refs)

    again = expand_package_closure(refs, _records())

    assert refs == snapshot
    assert again.added == []
    assert again.iterations == 0


def test_exact_range_requirement_matches_record() -> None:
    refs = {"P": "[1.0.0]"}

    expand_package_closure(refs, _records())

    assert "Q" in refs


def test_names_match_case_insensitively_without_duplicates() -> None:
    refs = {"p": "1.0.0", "q": "2.0.0"}

    expand_package_closure(refs, _records())

    assert refs == {"p": "1.0.0", "q": "2.0.0", "R": "3.0.0"}


def test_unmatched_version_adds_nothing() -> None:
    refs = {"P": "9.9.9"}

    result = expand_package_closure(refs, _records())

    assert refs == {"P": "9.9.9"}
    assert result.iterations == 0


def test_highest_transitive_version_wins() -> None:
    records = [
        NugetDependency("A", "1.0.0", {"Common": "1.0.0"}),
        NugetDependency("B", "1.0.0", {"Common": "2.0.0"}),
    ]
    refs = {"A": "1.0.0", "B": "1.0.0"}

    result = expand_package_closure(refs, records, policy=POLICY_HIGHEST)

    assert refs["Common"] == "2.0.0"
    assert result.added == ["Common"]


def test_highest_policy_upgrades_a_transitive_package() -> None:
    records = [
        NugetDependency("A", "1.0.0", {"Common": "1.0.0"}),
        NugetDependency("Common", "1.0.0", {"Late": "1.0.0"}),
        NugetDependency("Late", "1.0.0", {"Common": "1.5.0"}),
    ]
    refs = {"A": "1.0.0"}

    result = expand_package_closure(refs, records, pinned=["A"])

    assert refs["Common"] == "1.5.0"
    assert result.upgraded == {"Common": ("1.0.0", "1.5.0")}


def test_pinned_direct_reference_never_changes() -> None:
    records = [NugetDependency("A", "1.0.0", {"Common": "2.0.0"})]
    refs = {"A": "1.0.0", "Common": "1.0.0"}

    result = expand_package_closure(refs, records, pinned=list(refs))

    assert refs["Common"] == "1.0.0"
    assert result.upgraded == {}


def test_first_policy_keeps_first_version_seen() -> None:
    records = [
        NugetDependency("A", "1.0.0", {"Common": "1.0.0"}),
        NugetDependency("B", "1.0.0", {"Common": "2.0.0"}),
    ]
    refs = {"A": "1.0.0", "B": "1.0.0"}

    expand_package_closure(refs, records, policy=POLICY_FIRST)

    assert refs["Common"] == "1.0.0"
