import httpx
import pytest

from regclient import NotFound, ProtocolViolation, Token, paginate, stream_catalog, stream_tags

from conftest import REGISTRY, challenge_response, token_response

CATALOG = "/v2/_catalog"


def page(items, next_link=None, key="repositories"):
    headers = {"Link": f'<{next_link}>; rel="next"'} if next_link else {}
    return httpx.Response(200, headers=headers, json={key: items})


def three_pages(registry):
    def serve(request):
        last = request.url.params.get("last")
        if last is None:
            return page(["a", "b"], "/v2/_catalog?last=b&n=2")
        if last == "b":
            return page(["c"], "/v2/_catalog?last=c&n=2")
        if last == "c":
            return page([])
        raise AssertionError(f"unexpected page request {request.url}")

    registry.add("GET", CATALOG, serve)


async def test_yields_items_across_pages_in_order(registry, client):
    three_pages(registry)

    items = [item async for item in stream_catalog(client)]

    assert items == ["a", "b", "c"]
    assert len(registry.requests_to(CATALOG)) == 3


async def test_pages_are_fetched_on_demand(registry, client):
    three_pages(registry)
    stream = stream_catalog(client)

    assert registry.calls == []
    assert await stream.__anext__() == "a"
    assert len(registry.calls) == 1
    assert await stream.__anext__() == "b"
    assert len(registry.calls) == 1
    assert await stream.__anext__() == "c"
    assert len(registry.calls) == 2
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
    assert len(registry.calls) == 3

    # End of stream is final: no fourth page, no further requests.
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
    assert len(registry.calls) == 3


async def test_abandoned_stream_makes_no_more_requests(registry, client):
    three_pages(registry)
    stream = stream_catalog(client)

    async for item in stream:
        break
    await stream.aclose()

    assert item == "a"
    assert len(registry.calls) == 1


async def test_absolute_next_link(registry, client):
    registry.add(
        "GET",
        CATALOG,
        page(["x"], f"{REGISTRY}/v2/_catalog?last=x"),
        page(["y"]),
    )

    assert [r async for r in stream_catalog(client)] == ["x", "y"]
    assert registry.calls[1].url.params["last"] == "x"


async def test_duplicates_are_kept(registry, client):
    registry.add("GET", CATALOG, page(["a", "b"], "/v2/_catalog?last=b"), page(["b", "c"]))

    assert [r async for r in stream_catalog(client)] == ["a", "b", "b", "c"]


async def test_page_size_only_on_first_request(registry, client):
    three_pages(registry)

    [r async for r in stream_catalog(client, page_size=2)]

    first, second, third = registry.calls
    assert first.url.params["n"] == "2"
    assert second.url.params["last"] == "b"
    assert second.url.params.get_list("n") == ["2"]


async def test_invalid_page_size(client):
    with pytest.raises(ValueError):
        stream_catalog(client, page_size=0)


async def test_decode_failure_ends_stream_without_partial_page(registry, client):
    registry.add(
        "GET",
        CATALOG,
        page(["a"], "/v2/_catalog?last=a"),
        httpx.Response(200, content=b'{"repositories": ["b", "c"'),
    )
    seen = []

    with pytest.raises(ProtocolViolation):
        async for item in stream_catalog(client):
            seen.append(item)

    assert seen == ["a"]
    assert len(registry.calls) == 2


@pytest.mark.parametrize("body", [b"[]", b'{"repositories": "a,b"}', b"not json"])
async def test_malformed_pages(registry, client, body):
    registry.add("GET", CATALOG, httpx.Response(200, content=body))

    with pytest.raises(ProtocolViolation):
        [r async for r in stream_catalog(client)]


async def test_null_tag_list_is_empty(registry, client):
    registry.add("GET", "/v2/team/app/tags/list", httpx.Response(200, json={"name": "team/app", "tags": None}))

    assert [t async for t in stream_tags(client, "team/app")] == []


async def test_tags_for_unknown_repository(registry, client):
    registry.add(
        "GET",
        "/v2/team/missing/tags/list",
        httpx.Response(404, json={"errors": [{"code": "NAME_UNKNOWN", "message": "repository name not known to registry", "detail": {"name": "team/missing"}}]}),
    )

    with pytest.raises(NotFound) as excinfo:
        [t async for t in stream_tags(client, "team/missing")]

    assert excinfo.value.errors[0].code == "NAME_UNKNOWN"


async def test_pages_go_through_auth(registry, client):
    registry.add(
        "GET",
        "/v2/library/busybox/tags/list",
        challenge_response(),
        page(["1.36", "latest"], key="tags"),
    )
    registry.add("GET", "/token", token_response())

    assert [t async for t in stream_tags(client, "library/busybox")] == ["1.36", "latest"]


async def test_generic_paginate_with_custom_key(registry, client):
    registry.add("GET", "/v2/_custom", httpx.Response(200, json={"things": [1, 2]}))

    assert [i async for i in paginate(client, "/v2/_custom", "things")] == [1, 2]


async def test_foreign_next_link_gets_no_token(registry, client):
    client._token = Token("secret")
    registry.add(
        "GET",
        CATALOG,
        page(["a"], "https://mirror.other/v2/_catalog?last=a"),
        page(["b"]),
    )

    assert [r async for r in stream_catalog(client)] == ["a", "b"]
    first, second = registry.calls
    assert first.headers["Authorization"] == "Bearer secret"
    assert second.url.host == "mirror.other"
    assert "Authorization" not in second.headers
    assert second.headers["Host"] == "mirror.other"
