"""
Step definitions for the Metakernel parsing feature.

These tests verify the text side of kernel management:
- data section detection
- scalar and array value parsing
- path-symbol resolution of KERNELS_TO_LOAD
- malformed assignment reporting

BDD Flow: Feature file -> Step definitions -> Implementation
"""
import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from timecraft.kernel.errors import MalformedMetakernelError
from timecraft.kernel.metakernel import parse_metakernel

# Load scenarios from feature file
scenarios("../features/metakernel_parsing.feature")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def test_context():
    """Shared context for passing data between steps."""
    return {"text": None, "result": None, "error": None}


# =============================================================================
# Given Steps
# =============================================================================


@given(parsers.parse('the metakernel text "{text}"'))
def given_metakernel_text(test_context, text: str):
    test_context["text"] = text


@given("a metakernel with the data lines:")
def given_metakernel_data_lines(test_context, docstring: str):
    """Wrap the data lines in a begindata/begintext section."""
    test_context["text"] = (
        "KPL/MK\n\nMetakernel under test.\n\n"
        "\\begindata\n" + docstring + "\n\\begintext\n\nEnd of metakernel.\n"
    )


# =============================================================================
# When Steps
# =============================================================================


@when("I parse the metakernel")
def when_parse(test_context):
    test_context["result"] = parse_metakernel(test_context["text"])


@when("I parse the metakernel as UTF-8 bytes")
def when_parse_bytes(test_context):
    test_context["result"] = parse_metakernel(test_context["text"].encode("utf-8"))


@when("I try to parse the metakernel")
def when_try_parse(test_context):
    try:
        test_context["result"] = parse_metakernel(test_context["text"])
    except MalformedMetakernelError as e:
        test_context["error"] = e


# =============================================================================
# Then Steps
# =============================================================================


@then("the parse result is None")
def then_result_none(test_context):
    assert test_context["result"] is None


@then(parsers.parse('the kernel paths are "{paths}"'))
def then_kernel_paths(test_context, paths: str):
    expected = [p.strip() for p in paths.split(",")]
    assert test_context["result"].paths == expected


@then("the kernel paths are None")
def then_kernel_paths_none(test_context):
    result = test_context["result"]
    assert result is not None
    assert result.paths is None


@then(parsers.parse('the field "{name}" is the string "{value}"'))
def then_field_string(test_context, name: str, value: str):
    actual = test_context["result"].fields[name]
    assert isinstance(actual, str)
    assert actual == value


@then(parsers.parse('the field "{name}" is the number {value:d}'))
def then_field_number(test_context, name: str, value: int):
    actual = test_context["result"].fields[name]
    assert not isinstance(actual, str)
    assert actual == value


@then(parsers.parse('the field "{name}" holds the string "{value}" at index {index:d}'))
def then_array_string(test_context, name: str, value: str, index: int):
    element = test_context["result"].fields[name][index]
    assert isinstance(element, str)
    assert element == value


@then(parsers.parse('the field "{name}" holds the number {value:d} at index {index:d}'))
def then_array_number(test_context, name: str, value: int, index: int):
    element = test_context["result"].fields[name][index]
    assert isinstance(element, (int, float))
    assert element == value


@then(parsers.parse("a malformed metakernel error is raised for data line {line:d}"))
def then_malformed(test_context, line: int):
    error = test_context["error"]
    assert error is not None
    assert error.line_number == line
    assert "NO ASSIGNMENT" in error.line
