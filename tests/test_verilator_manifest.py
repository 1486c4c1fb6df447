"""Tests for reading extra C++ sources out of a Bender.yml."""

import pytest

from vtest.errors import ConfigException
from vtest.verilator_manifest import get_cpp_sources


def test_sources_are_resolved_against_manifest(tmp_path):
    manifest = tmp_path / "Bender.yml"
    manifest.write_text(
        "sources:\n"
        "  verilator:\n"
        "    - csrc/memory.cc\n"
        "    - ../shared/util.cc\n"
        "  other:\n"
        "    - nope.cc\n")

    sources = get_cpp_sources(manifest, "verilator")

    assert sources == [(tmp_path / "csrc/memory.cc").resolve(),
                       (tmp_path.parent / "shared/util.cc").resolve()]


def test_missing_target_gives_no_sources(tmp_path):
    manifest = tmp_path / "Bender.yml"
    manifest.write_text("sources:\n  other:\n    - a.cc\n")

    assert get_cpp_sources(manifest, "verilator") == []


def test_empty_manifest(tmp_path):
    manifest = tmp_path / "Bender.yml"
    manifest.write_text("")

    assert get_cpp_sources(manifest, "verilator") == []


def test_target_must_be_a_list(tmp_path):
    manifest = tmp_path / "Bender.yml"
    manifest.write_text("sources:\n  verilator: single.cc\n")

    with pytest.raises(ConfigException, match="must be a list"):
        get_cpp_sources(manifest, "verilator")


def test_manifest_must_be_a_mapping(tmp_path):
    manifest = tmp_path / "Bender.yml"
    manifest.write_text("- just\n- a list\n")

    with pytest.raises(ConfigException, match="not a mapping"):
        get_cpp_sources(manifest, "verilator")


def test_missing_manifest(tmp_path):
    with pytest.raises(ConfigException, match="does not exist"):
        get_cpp_sources(tmp_path / "Bender.yml", "verilator")
