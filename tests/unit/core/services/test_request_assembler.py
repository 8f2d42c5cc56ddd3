import json

import httpx
import pytest
from http_pipeline.core.common.exceptions import BodyEncodingError
from http_pipeline.core.domain.content_kind import ContentKind
from http_pipeline.core.domain.request_options import (
    FormPairs,
    HttpMethod,
    JsonBody,
    MultipartBody,
    MultipartPart,
    RawBody,
    RequestOptions,
)
from http_pipeline.core.services.header_builder import HeaderBuilder
from http_pipeline.core.services.request_assembler import RequestAssembler

URL = "https://api.example.com/items"


def _assemble(**kwargs):
    options = RequestOptions(url=URL, **kwargs)
    headers = HeaderBuilder().build(options.request_kind, options.headers)
    return RequestAssembler().assemble(options, headers)


def test_get_never_carries_a_body() -> None:
    request = _assemble(
        method=HttpMethod.GET,
        request_kind=ContentKind.JSON,
        body=JsonBody({"ignored": True}),
    )

    assert request.content is None
    assert request.multipart is None
    assert not request.has_body


def test_json_body_is_compact_utf8() -> None:
    request = _assemble(
        request_kind=ContentKind.JSON, body=JsonBody({"name": "Zoë", "n": [1, 2]})
    )

    assert request.content == '{"name":"Zoë","n":[1,2]}'.encode()
    assert json.loads(request.content) == {"name": "Zoë", "n": [1, 2]}


def test_absent_body_with_json_kind() -> None:
    request = _assemble(method="DELETE")

    assert request.method is HttpMethod.DELETE
    assert request.content is None


def test_form_urlencoded_body() -> None:
    request = _assemble(
        request_kind=ContentKind.FORM_URLENCODED,
        body=FormPairs([("q", "a b&c"), ("page", "2")]),
    )

    assert request.content == b"q=a+b%26c&page=2"
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"


def test_blob_body_is_passed_through() -> None:
    request = _assemble(request_kind=ContentKind.BLOB, body=RawBody(b"\x00\x01"))

    assert request.content == b"\x00\x01"


def test_text_body_is_utf8_encoded() -> None:
    request = _assemble(request_kind=ContentKind.HTML, body=RawBody("<p>é</p>"))

    assert request.content == "<p>é</p>".encode()


def test_form_data_sets_boundary_and_keeps_parts() -> None:
    parts = (
        MultipartPart(name="field", value="value"),
        MultipartPart(
            name="upload",
            value=b"data",
            filename="a.bin",
            content_type="application/octet-stream",
        ),
    )
    request = _assemble(request_kind=ContentKind.FORM_DATA, body=MultipartBody(parts))

    assert request.multipart == parts
    assert request.content is None
    assert request.headers["content-type"].startswith("multipart/form-data; boundary=")


def test_form_data_keeps_caller_boundary() -> None:
    request = _assemble(
        request_kind=ContentKind.FORM_DATA,
        headers={"Content-Type": "multipart/form-data; boundary=fixed"},
        body=MultipartBody((MultipartPart(name="a", value="1"),)),
    )

    assert request.headers["content-type"] == "multipart/form-data; boundary=fixed"


@pytest.mark.parametrize(
    ("kind", "body"),
    [
        (ContentKind.BLOB, RawBody("not bytes")),
        (ContentKind.BLOB, JsonBody([1])),
        (ContentKind.FORM_URLENCODED, JsonBody({"a": "b"})),
        (ContentKind.FORM_DATA, FormPairs({"a": "b"})),
        (ContentKind.TEXT, JsonBody("text")),
    ],
)
def test_mismatched_body_raises(kind: ContentKind, body: object) -> None:
    with pytest.raises(BodyEncodingError):
        _assemble(request_kind=kind, body=body)


def test_assembler_uses_given_headers() -> None:
    headers = httpx.Headers({"X-Trace": "abc"})
    options = RequestOptions(url=URL, body=JsonBody(1))

    request = RequestAssembler().assemble(options, headers)

    assert request.headers["x-trace"] == "abc"
    assert request.content == b"1"


@pytest.mark.parametrize("content", ['{"a":1}', b'{"a":1}'])
def test_serialized_json_is_sent_unchanged(content: str | bytes) -> None:
    request = _assemble(request_kind=ContentKind.JSON, body=RawBody(content))

    assert request.content == b'{"a":1}'


@pytest.mark.parametrize(
    ("kind", "body"),
    [
        (ContentKind.JSON, JsonBody({})),
        (ContentKind.FORM_URLENCODED, FormPairs({"a": "1"})),
        (ContentKind.BLOB, RawBody(b"\x00")),
        (ContentKind.TEXT, RawBody("t")),
        (ContentKind.HTML, RawBody("<p/>")),
    ],
)
def test_outbound_content_type_is_canonical(kind: ContentKind, body: object) -> None:
    request = _assemble(request_kind=kind, body=body)

    assert request.headers.get_list("content-type") == [kind.mime_type]


def test_form_data_content_type_adds_only_a_boundary() -> None:
    # The one exception to the canonical string: multipart needs its boundary
    options = RequestOptions(
        url=URL,
        request_kind=ContentKind.FORM_DATA,
        body=MultipartBody((MultipartPart(name="a", value="1"),)),
    )
    headers = HeaderBuilder().build(options.request_kind, options.headers)

    request = RequestAssembler().assemble(options, headers)

    content_type, _, boundary = request.headers["content-type"].partition(
        "; boundary="
    )
    assert content_type == ContentKind.FORM_DATA.mime_type
    assert boundary
    # The header set handed in is left untouched
    assert headers["content-type"] == ContentKind.FORM_DATA.mime_type
