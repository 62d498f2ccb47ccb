from unittest.mock import patch

import httpx
import pytest

from config import settings
from services.media_probe import build_probe_client, classify_network, probe_allowed, probe_image, with_cache_bust


IMAGE_URL = "https://cdn.example/ad.png"
IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15"
DESKTOP_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/124.0"


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.parametrize(
    "headers,constrained,reason",
    [
        ({"user-agent": DESKTOP_UA}, False, "default"),
        ({"user-agent": IPHONE_UA}, True, "mobile-user-agent"),
        ({"user-agent": DESKTOP_UA, "save-data": "on"}, True, "save-data"),
        ({"user-agent": DESKTOP_UA, "ect": "2g"}, True, "ect:2g"),
        ({"user-agent": DESKTOP_UA, "ect": "4g"}, False, "default"),
    ],
)
def test_classify_network(headers, constrained, reason):
    profile = classify_network(headers)
    assert profile.constrained is constrained
    assert profile.reason == reason


def test_cache_bust_appends_to_existing_query():
    assert with_cache_bust("https://cdn.example/a.png", stamp=42) == "https://cdn.example/a.png?_cb=42"
    assert with_cache_bust("https://cdn.example/a.png?v=2", stamp=42) == "https://cdn.example/a.png?v=2&_cb=42"


@pytest.mark.asyncio
async def test_unconstrained_probe_uses_single_head_request():
    seen = []

    def handler(request):
        seen.append(request.method)
        return httpx.Response(200, headers={"content-type": "text/plain"})

    async with _client(handler) as client:
        status = await probe_image(IMAGE_URL, constrained=False, client=client)

    assert status.ready is True
    assert seen == ["HEAD"]


@pytest.mark.asyncio
async def test_head_refused_falls_back_to_ranged_get():
    seen = []

    def handler(request):
        seen.append((request.method, request.headers.get("range")))
        if request.method == "HEAD":
            return httpx.Response(405)
        return httpx.Response(206, headers={"content-type": "image/png"})

    async with _client(handler) as client:
        status = await probe_image(IMAGE_URL, constrained=False, client=client)

    assert status.ready is True
    assert seen == [("HEAD", None), ("GET", "bytes=0-0")]


@pytest.mark.asyncio
async def test_constrained_probe_requires_image_content_type_and_retries():
    calls = []

    def handler(request):
        calls.append(request.method)
        return httpx.Response(200, headers={"content-type": "text/html"})

    async with _client(handler) as client:
        status = await probe_image(IMAGE_URL, constrained=True, client=client, retries=2, retry_delay=0)

    assert status.ready is False
    assert status.attempts == 3
    assert calls == ["GET", "GET", "GET"]
    assert "content-type" in status.error


@pytest.mark.asyncio
async def test_constrained_probe_recovers_on_retry():
    responses = iter([httpx.Response(503), httpx.Response(206, headers={"content-type": "image/jpeg"})])

    async with _client(lambda request: next(responses)) as client:
        status = await probe_image(IMAGE_URL, constrained=True, client=client, retries=2, retry_delay=0)

    assert status.ready is True
    assert status.attempts == 2
    assert status.status_code == 206


@pytest.mark.asyncio
async def test_network_errors_report_unready_without_raising():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    async with _client(handler) as client:
        status = await probe_image(IMAGE_URL, constrained=False, client=client)

    assert status.ready is False
    assert status.error == "ConnectError"


@pytest.mark.asyncio
async def test_cache_bust_probe_targets_suffixed_url():
    urls = []

    def handler(request):
        urls.append(str(request.url))
        return httpx.Response(200)

    async with _client(handler) as client:
        await probe_image(IMAGE_URL, constrained=False, cache_bust=True, client=client)

    assert urls[0].startswith(f"{IMAGE_URL}?_cb=")


@pytest.mark.parametrize(
    "url,allowed",
    [
        ("https://cdn.example/ad.png", True),
        ("http://169.254.169.254/latest/meta-data/", False),
        ("http://127.0.0.1:8000/admin", False),
        ("http://10.1.2.3/a.png", False),
        ("http://[::1]/a.png", False),
        ("http://localhost/a.png", False),
        ("http://metadata.google.internal/a.png", False),
        ("http://intranet/a.png", False),
        ("ftp://cdn.example/a.png", False),
        ("https://93.184.216.34/a.png", True),
    ],
)
def test_probe_allowed_refuses_non_public_hosts(url, allowed):
    assert probe_allowed(url) is allowed


def test_allow_list_limits_probing_to_listed_and_storage_hosts():
    with (
        patch.object(settings, "MEDIA_PROBE_ALLOWED_HOSTS", ["images.partner.example"]),
        patch.object(settings, "STORAGE_PUBLIC_BASE_URL", "http://localhost:54321/storage/v1/object/public"),
    ):
        assert probe_allowed("https://images.partner.example/a.png") is True
        assert probe_allowed("http://localhost:54321/storage/v1/object/public/ad-media/a.png") is True
        assert probe_allowed("https://cdn.example/a.png") is False


@pytest.mark.asyncio
async def test_refused_host_is_reported_unready_without_a_request():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, headers={"content-type": "image/png"})

    async with _client(handler) as client:
        status = await probe_image("http://169.254.169.254/latest/meta-data/", constrained=True, client=client)

    assert status.ready is False
    assert status.attempts == 0
    assert status.error == "host not allowed"
    assert seen == []


@pytest.mark.asyncio
async def test_redirect_to_internal_host_is_not_followed():
    seen = []

    def handler(request):
        seen.append(request.url.host)
        if request.url.host == "cdn.example":
            return httpx.Response(302, headers={"location": "http://169.254.169.254/latest/meta-data/"})
        return httpx.Response(200, headers={"content-type": "image/png"})

    async with build_probe_client(transport=httpx.MockTransport(handler)) as client:
        status = await probe_image(IMAGE_URL, constrained=False, client=client)

    assert status.ready is False
    assert status.error == "host not allowed"
    assert seen == ["cdn.example"]
