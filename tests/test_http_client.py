import httpx
import pytest


@pytest.mark.anyio
async def test_successful_body_is_cached(mock_client):
    calls = []

    def handler(request):
        calls.append(str(request.url))
        return httpx.Response(200, json={"ok": True})

    client = mock_client(handler)
    first = await client.get_json("https://api.example.com/data", params={"a": 1}, revalidate=30)
    second = await client.get_json("https://api.example.com/data", params={"a": 1}, revalidate=30)

    assert first == second == {"ok": True}
    assert len(calls) == 1
    await client.close_client()


@pytest.mark.anyio
async def test_different_params_are_separate_entries(mock_client):
    calls = []

    def handler(request):
        calls.append(request.url.params.get("a"))
        return httpx.Response(200, json={"a": request.url.params.get("a")})

    client = mock_client(handler)
    await client.get_json("https://api.example.com/data", params={"a": 1})
    await client.get_json("https://api.example.com/data", params={"a": 2})

    assert calls == ["1", "2"]


@pytest.mark.anyio
async def test_zero_revalidate_bypasses_cache(mock_client):
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(200, json=[])

    client = mock_client(handler)
    await client.get_json("https://api.example.com/ping", revalidate=0)
    await client.get_json("https://api.example.com/ping", revalidate=0)

    assert len(calls) == 2


@pytest.mark.anyio
async def test_error_status_raises_and_is_not_cached(mock_client):
    responses = [httpx.Response(503), httpx.Response(200, json={"ok": True})]

    def handler(request):
        return responses.pop(0)

    client = mock_client(handler)
    with pytest.raises(httpx.HTTPStatusError):
        await client.get_json("https://api.example.com/flaky")

    assert await client.get_json("https://api.example.com/flaky") == {"ok": True}


@pytest.mark.anyio
async def test_clear_cache_forces_refetch(mock_client):
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(200, json={"n": len(calls)})

    client = mock_client(handler)
    await client.get_json("https://api.example.com/data")
    client.clear_cache()
    assert await client.get_json("https://api.example.com/data") == {"n": 2}
