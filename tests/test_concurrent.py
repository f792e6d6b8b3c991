"""
Tests that the service handles many simultaneous requests correctly.

Each request gets its own session; the unique index on short_code is the
only coordination between concurrent creates.
"""

import asyncio

import pytest


@pytest.mark.asyncio
class TestConcurrentRequests:
    """Fire requests concurrently against one application instance."""

    async def test_concurrent_shorten_requests(self, async_client):
        """Concurrent creates with different URLs all succeed with distinct codes."""
        concurrency = 30
        urls = [f"https://example.com/page_{i}" for i in range(concurrency)]
        tasks = [
            async_client.post("/shorten", json={"originalUrl": url, "expireInHours": 1})
            for url in urls
        ]
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        short_urls = []
        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 200, f"Request {i}: status {r.status_code}"
            short_urls.append(r.json()["shortUrl"])

        assert len(set(short_urls)) == concurrency

        # Every code resolves to the URL it was created for
        redirects = await asyncio.gather(*[
            async_client.get(f"/{short_url.rsplit('/', 1)[1]}", follow_redirects=False)
            for short_url in short_urls
        ])
        assert [r.headers["location"] for r in redirects] == urls

    async def test_concurrent_mixed_requests(self, async_client):
        """Creates and lookups interleave without interfering."""
        created = await async_client.post(
            "/shorten", json={"originalUrl": "https://example.com/hot", "expireInHours": 1}
        )
        code = created.json()["shortUrl"].rsplit("/", 1)[1]

        tasks = []
        for i in range(20):
            tasks.append(async_client.get(f"/{code}", follow_redirects=False))
            tasks.append(async_client.get(f"/missing{i:02d}", follow_redirects=False))
            tasks.append(async_client.post(
                "/shorten", json={"originalUrl": f"https://example.com/{i}", "expireInHours": 1}
            ))
        responses = await asyncio.gather(*tasks)

        for i in range(0, len(responses), 3):
            hit, miss, create = responses[i:i + 3]
            assert hit.status_code == 302
            assert hit.headers["location"] == "https://example.com/hot"
            assert miss.status_code == 404
            assert create.status_code == 200
