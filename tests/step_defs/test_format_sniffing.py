"""Step definitions for format sniffing."""
import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from timecraft.kernel.sniffer import is_metakernel

# Link to feature file
scenarios("../features/format_sniffing.feature")


@pytest.fixture
def test_context():
    """Shared test context passed between steps."""
    return {"contents": None, "verdict": None}


@given(parsers.parse('the text contents "{contents}"'))
def given_text(test_context, contents: str):
    test_context["contents"] = contents


@given("binary contents with the marker embedded between non-UTF-8 bytes")
def given_binary_with_marker(test_context):
    test_context["contents"] = b"\xff\xfe\x00DAF" + b"KERNELS_TO_LOAD" + b"\x80\x81\x00"


@given("binary contents without the marker")
def given_binary_without_marker(test_context):
    test_context["contents"] = bytearray(b"DAF/SPK \x00\xff" * 64)


@when("I sniff the contents")
def when_sniff(test_context):
    test_context["verdict"] = is_metakernel(test_context["contents"])


@then("the contents look like a metakernel")
def then_metakernel(test_context):
    assert test_context["verdict"] is True


@then("the contents do not look like a metakernel")
def then_not_metakernel(test_context):
    assert test_context["verdict"] is False
