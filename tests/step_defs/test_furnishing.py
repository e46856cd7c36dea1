"""
Step definitions for the Furnishing feature.

These tests verify the caller-side control flow:
- sniff a buffer and route metakernels through the parser
- fetch and load every resolved kernel path
- roll back a partially furnished metakernel
- unfurnish a metakernel and all of its kernels
"""
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from timecraft.kernel.registry import KernelRegistry
from timecraft.kernel.storage import DirectoryStorage
from timecraft.lib.furnish import furnish, unfurnish

# Load scenarios from feature file
scenarios("../features/furnishing.feature")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def test_context():
    """Shared context for passing data between steps."""
    return {"registry": None, "files": {}, "records": None, "error": None}


def _metakernel(docstring: str) -> bytes:
    return ("\\begindata\n" + docstring + "\n\\begintext\n").encode("utf-8")


def _fetch(test_context):
    def fetch(path: str) -> bytes:
        try:
            return test_context["files"][path]
        except KeyError:
            raise FileNotFoundError(path) from None

    return fetch


# =============================================================================
# Given Steps
# =============================================================================


@given("a kernel registry backed by a storage directory")
def given_registry(test_context, tmp_path, pool):
    test_context["storage_dir"] = tmp_path / "kernels"
    test_context["pool"] = pool
    test_context["registry"] = KernelRegistry(
        DirectoryStorage(test_context["storage_dir"]), pool
    )


@given("the kernel files:")
def given_kernel_files(test_context, datatable):
    header, *rows = datatable
    assert header == ["path", "contents"]
    for path, contents in rows:
        test_context["files"][path] = contents.encode("utf-8")


# =============================================================================
# When Steps
# =============================================================================


@when(parsers.parse('I furnish a binary kernel under key "{key}"'))
def when_furnish_binary(test_context, key: str):
    test_context["records"] = furnish(
        test_context["registry"], b"DAF/SPK \x00\xff\x10", key=key, fetch=_fetch(test_context)
    )


@when(parsers.parse('I furnish the metakernel under key "{key}"'))
def when_furnish_metakernel(test_context, key: str, docstring: str):
    test_context["records"] = furnish(
        test_context["registry"], _metakernel(docstring), key=key, fetch=_fetch(test_context)
    )


@when(parsers.parse('I try to furnish the metakernel under key "{key}"'))
def when_try_furnish_metakernel(test_context, key: str, docstring: str):
    try:
        furnish(
            test_context["registry"], _metakernel(docstring), key=key, fetch=_fetch(test_context)
        )
    except Exception as e:
        test_context["error"] = e


@when(parsers.parse('I unfurnish "{key}"'))
def when_unfurnish(test_context, key: str):
    assert unfurnish(test_context["registry"], key) == 2


# =============================================================================
# Then Steps
# =============================================================================


@then(parsers.parse("{count:d} kernels are loaded"))
def then_loaded_count(test_context, count: int):
    assert len(test_context["records"]) == count
    assert test_context["pool"].count() == count


@then(parsers.parse('the registry has the key "{key}"'))
def then_has_key(test_context, key: str):
    assert key in test_context["registry"]


@then("the registry has no keys")
def then_no_keys(test_context):
    assert len(test_context["registry"]) == 0


@then(parsers.parse('the toolkit received the kernels "{contents}" in order'))
def then_toolkit_order(test_context, contents: str):
    expected = [c.strip().encode("utf-8") for c in contents.split(",")]
    furnished = [Path(location).read_bytes() for location in test_context["pool"].loaded]
    assert furnished == expected


@then("the storage directory is empty")
def then_storage_empty(test_context):
    storage_dir = test_context["storage_dir"]
    assert not storage_dir.exists() or list(storage_dir.iterdir()) == []


@then("the furnish fails because a kernel file is missing")
def then_missing_kernel(test_context):
    assert isinstance(test_context["error"], FileNotFoundError)
