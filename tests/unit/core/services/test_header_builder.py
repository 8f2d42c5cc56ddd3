import pytest
from http_pipeline.core.common.exceptions import (
    InvalidHeaderValueError,
    ValidationError,
)
from http_pipeline.core.domain.content_kind import ContentKind
from http_pipeline.core.services.header_builder import HeaderBuilder


@pytest.fixture
def builder() -> HeaderBuilder:
    return HeaderBuilder()


def test_request_kind_seeds_content_type(builder: HeaderBuilder) -> None:
    headers = builder.build(ContentKind.FORM_URLENCODED, None)

    assert headers["content-type"] == "application/x-www-form-urlencoded"


def test_no_kind_means_no_content_type(builder: HeaderBuilder) -> None:
    headers = builder.build(None, {"Accept": "application/json"})

    assert "content-type" not in headers
    assert headers["accept"] == "application/json"


def test_caller_content_type_wins_case_insensitively(builder: HeaderBuilder) -> None:
    headers = builder.build(ContentKind.JSON, {"content-type": "text/csv"})

    assert headers.get_list("Content-Type") == ["text/csv"]


def test_non_string_values(builder: HeaderBuilder) -> None:
    headers = builder.build(None, {"X-Count": 5, "X-Raw": b"abc"})

    assert headers["x-count"] == "5"
    assert headers["x-raw"] == "abc"


@pytest.mark.parametrize(
    "caller_headers",
    [
        {"X-Bad": "line\r\nInjected: yes"},
        {"X-Obj": object()},
        {"X-Flag": True},
        {"X-Bytes": b"\xff\xfe"},
        {"bad name": "value"},
        {"": "value"},
    ],
)
def test_invalid_headers_are_rejected(
    builder: HeaderBuilder, caller_headers: dict
) -> None:
    with pytest.raises(InvalidHeaderValueError):
        builder.build(ContentKind.JSON, caller_headers)


def test_invalid_header_is_a_validation_error(builder: HeaderBuilder) -> None:
    with pytest.raises(ValidationError) as exc_info:
        builder.build(None, {"X-Bad": None})

    assert exc_info.value.header_name == "X-Bad"  # type: ignore[attr-defined]
