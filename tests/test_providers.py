"""
Tests for the general-audience providers.

Covers the MediaProvider base plus YouTube/SearXNG, Reddit/Giphy,
Pexels/Pixabay/Picsum and the NASA/Dog/Cat feeds. Upstream responses come
from FakeFetcher routes keyed by URL fragment.
"""

import pytest

from media_feed.domain.entities.media import ContentMode, MediaType, SafetyLevel
from media_feed.infrastructure.sources.base_provider import (
    Capability,
    MediaProvider,
    is_hentai_query,
    is_placeholder_query,
)
from media_feed.infrastructure.sources.feeds import CatProvider, DogProvider, NasaApodProvider
from media_feed.infrastructure.sources.social import GiphyProvider, RedditProvider
from media_feed.infrastructure.sources.stock import PexelsProvider, PicsumProvider, PixabayProvider
from media_feed.infrastructure.sources.web import INVIDIOUS_INSTANCES, InvidiousProvider, SearxngProvider

IMAGE = ContentMode.IMAGE
VIDEO = ContentMode.VIDEO


class EchoProvider(MediaProvider):
    """Search-only image provider echoing back whatever the fetcher returns."""

    tag = "echo"
    source_tag = "Echo"
    capabilities = frozenset({Capability.SEARCH, Capability.IMAGE})

    async def _fetch(self, query, mode, safety):
        data = await self._get_json(f"https://echo.test/?q={self.resolve_term(query)}")
        return self.normalizer.build_many(data, lambda item: self.normalizer.build(item["id"], thumbnail=item["src"]))


class HentaiAwareProvider(EchoProvider):
    hentai_term = "special"


# =============================================================================
# MediaProvider base
# =============================================================================


class TestQueryHelpers:
    @pytest.mark.parametrize("query", [None, "", "  ", "18+", " NSFW ", "trending", "all"])
    def test_placeholder(self, query):
        assert is_placeholder_query(query)

    def test_not_placeholder(self):
        assert not is_placeholder_query("sunset")

    def test_hentai_is_substring_match(self):
        assert is_hentai_query("Hentai girls")
        assert not is_hentai_query("anime")


class TestMediaProviderBase:
    def test_supports(self, fake_fetcher):
        provider = EchoProvider(fake_fetcher)
        assert provider.supports("cats", IMAGE)
        assert not provider.supports("", IMAGE)  # no trending capability
        assert not provider.supports("cats", VIDEO)

    def test_resolve_term(self, fake_fetcher):
        provider = EchoProvider(fake_fetcher)
        assert provider.resolve_term("18+") == "trending"
        assert provider.resolve_term("  cats ") == "cats"
        assert provider.resolve_term("hentai") == "hentai"
        assert HentaiAwareProvider(fake_fetcher).resolve_term("hentai art") == "special"

    @pytest.mark.asyncio
    async def test_unsupported_combination_makes_no_call(self, fake_fetcher):
        assert await EchoProvider(fake_fetcher).fetch(None, IMAGE) == []
        assert fake_fetcher.calls == []

    @pytest.mark.asyncio
    async def test_fetch_never_raises(self, routed_fetcher):
        fetcher = routed_fetcher({"echo.test": RuntimeError("boom")})
        assert await EchoProvider(fetcher).fetch("cats", IMAGE) == []

    @pytest.mark.asyncio
    async def test_failed_fetch_yields_empty(self, fake_fetcher):
        # None payload -> iterating it raises inside _fetch -> swallowed
        assert await EchoProvider(fake_fetcher).fetch("cats", IMAGE) == []

    @pytest.mark.asyncio
    async def test_fetch_returns_records(self, routed_fetcher):
        fetcher = routed_fetcher({"echo.test": [{"id": "1", "src": "https://a.test/1.jpg"}]})
        records = await EchoProvider(fetcher).fetch("cats", IMAGE)
        assert [r.id for r in records] == ["echo-1"]
        assert fetcher.urls() == ["https://echo.test/?q=cats"]


# =============================================================================
# Web
# =============================================================================


class TestInvidiousProvider:
    @pytest.mark.asyncio
    async def test_maps_videos(self, routed_fetcher, rng):
        fetcher = routed_fetcher(
            {"/api/v1/search": [{"videoId": "abc", "title": "Cat video", "author": "Chan"}, {"title": "no id"}]}
        )
        records = await InvidiousProvider(fetcher, rng).fetch("cats", VIDEO)

        assert len(records) == 1
        record = records[0]
        instance = fetcher.urls()[0].split("/api/v1/search")[0]
        assert instance in INVIDIOUS_INSTANCES
        assert record.id == "yt-abc"
        assert record.media_type is MediaType.VIDEO
        assert record.thumbnail_url == "https://i.ytimg.com/vi/abc/hqdefault.jpg"
        assert record.video_url == f"{instance}/latest_version?id=abc&itag=18"
        assert record.external_link == "https://youtube.com/watch?v=abc"
        assert (record.dimensions.height, record.dimensions.width) == (720, 1280)
        assert "q=cats" in fetcher.urls()[0]
        assert "type=video" in fetcher.urls()[0]

    @pytest.mark.asyncio
    async def test_caps_at_ten(self, routed_fetcher, rng):
        items = [{"videoId": f"v{i}"} for i in range(15)]
        records = await InvidiousProvider(routed_fetcher({"/api/v1/search": items}), rng).fetch("x", VIDEO)
        assert len(records) == 10

    @pytest.mark.asyncio
    async def test_no_image_mode(self, fake_fetcher):
        assert await InvidiousProvider(fake_fetcher).fetch("cats", IMAGE) == []

    @pytest.mark.asyncio
    async def test_error_payload(self, routed_fetcher):
        fetcher = routed_fetcher({"/api/v1/search": {"error": "rate limited"}})
        assert await InvidiousProvider(fetcher).fetch("cats", VIDEO) == []


class TestSearxngProvider:
    @pytest.fixture
    def payload(self):
        return {
            "results": [
                {
                    "url": "https://site.test/page",
                    "img_src": "https://site.test/i.jpg",
                    "title": "Result",
                    "source": "Site",
                },
                {
                    "url": "https://vids.test/watch",
                    "thumbnail": "//vids.test/t.jpg",
                    "template": "videos.html",
                },
                {"title": "no url"},
            ]
        }

    @pytest.mark.asyncio
    async def test_maps_results(self, routed_fetcher, payload):
        records = await SearxngProvider(routed_fetcher({"/search?": payload})).fetch("sunset", IMAGE)

        assert len(records) == 2
        image, video = records
        assert image.media_type is MediaType.IMAGE
        assert image.attribution.display_name == "Site"
        assert image.external_link == "https://site.test/page"
        assert image.id.startswith("web-")
        assert video.media_type is MediaType.VIDEO
        assert video.thumbnail_url == "https://vids.test/t.jpg"
        assert video.video_url == "https://vids.test/watch"
        assert video.title == "Web Result"
        assert video.attribution.display_name == "Web"

    @pytest.mark.asyncio
    async def test_safesearch_follows_safety(self, routed_fetcher, payload):
        fetcher = routed_fetcher({"/search?": payload})
        provider = SearxngProvider(fetcher)
        await provider.fetch("sunset", IMAGE, SafetyLevel.STRICT)
        await provider.fetch("sunset", VIDEO, SafetyLevel.RELAXED)

        strict_url, relaxed_url = fetcher.urls()
        assert "safesearch=1" in strict_url
        assert "categories=images" in strict_url
        assert "safesearch=0" in relaxed_url
        assert "categories=videos" in relaxed_url

    @pytest.mark.asyncio
    async def test_search_only(self, fake_fetcher):
        assert await SearxngProvider(fake_fetcher).fetch("", IMAGE) == []
        assert fake_fetcher.calls == []


# =============================================================================
# Social
# =============================================================================


class TestRedditProvider:
    @pytest.mark.asyncio
    async def test_image_search(self, routed_fetcher, reddit_listing):
        fetcher = routed_fetcher({"reddit.com": reddit_listing})
        records = await RedditProvider(fetcher).fetch("sunrise", IMAGE)

        url = fetcher.urls()[0]
        assert "/r/pics+Images+itookapicture+photographs+Art+Design/search.json" in url
        assert "q=sunrise" in url
        assert "restrict_sr=on" in url

        assert len(records) == 1
        record = records[0]
        assert record.id == "reddit-abc1-image"
        assert record.thumbnail_url == "https://preview.redd.it/sunrise.jpg?width=1080&s=xyz"
        assert (record.dimensions.height, record.dimensions.width) == (1350, 1080)
        assert record.external_link == "https://reddit.com/r/pics/comments/abc1/"
        assert record.attribution.display_name == "hiker"

    @pytest.mark.asyncio
    async def test_video_listing(self, routed_fetcher, reddit_listing):
        records = await RedditProvider(routed_fetcher({"reddit.com": reddit_listing})).fetch("loop", VIDEO)

        assert [r.id for r in records] == ["reddit-vid2-video"]
        assert records[0].video_url == "https://v.redd.it/vid2/DASH_720.mp4"
        assert records[0].thumbnail_url == "https://preview.redd.it/vid2.jpg"

    @pytest.mark.asyncio
    async def test_over_18_never_returned(self, routed_fetcher, reddit_listing):
        records = await RedditProvider(routed_fetcher({"reddit.com": reddit_listing})).fetch("hidden", IMAGE)
        assert all("nsfw3" not in r.id for r in records)

    @pytest.mark.asyncio
    async def test_trending_reads_hot_listing(self, routed_fetcher, reddit_listing, rng):
        fetcher = routed_fetcher({"reddit.com": reddit_listing})
        await RedditProvider(fetcher, rng).fetch(None, IMAGE)
        assert fetcher.urls()[0].endswith("/hot.json?limit=25")


class TestGiphyProvider:
    @pytest.mark.asyncio
    async def test_maps_gifs_as_videos(self, routed_fetcher, giphy_payload):
        fetcher = routed_fetcher({"api.giphy.com": giphy_payload})
        records = await GiphyProvider(fetcher, api_key="k").fetch("dance", VIDEO)

        assert [r.id for r in records] == ["giphy-g1", "giphy-g2"]
        full, bare = records
        assert full.is_video
        assert full.video_url == "https://media.giphy.com/g1/giphy.mp4"
        assert (full.dimensions.height, full.dimensions.width) == (480, 360)
        assert full.attribution.display_name == "catgifs"
        assert bare.title == "Animated GIF"
        assert bare.video_url is None
        assert (bare.dimensions.height, bare.dimensions.width) == (400, 400)

        url = fetcher.urls()[0]
        assert "/v1/gifs/search?" in url
        assert "rating=g" in url
        assert "q=dance" in url

    @pytest.mark.asyncio
    async def test_trending_without_query(self, routed_fetcher, giphy_payload):
        fetcher = routed_fetcher({"api.giphy.com": giphy_payload})
        await GiphyProvider(fetcher, api_key="k").fetch(None, VIDEO)
        assert "/v1/gifs/trending?" in fetcher.urls()[0]

    @pytest.mark.asyncio
    async def test_no_key_no_call(self, fake_fetcher):
        assert await GiphyProvider(fake_fetcher).fetch("dance", VIDEO) == []
        assert fake_fetcher.calls == []


# =============================================================================
# Stock
# =============================================================================


class TestPexelsProvider:
    @pytest.mark.asyncio
    async def test_photos_use_default_term_and_auth_header(self, routed_fetcher):
        payload = {
            "photos": [
                {
                    "id": 1,
                    "src": {"large": "https://images.pexels.com/1.jpg"},
                    "alt": "",
                    "photographer": "Ann",
                    "url": "https://www.pexels.com/photo/1",
                    "height": 4000,
                    "width": 3000,
                }
            ]
        }
        fetcher = routed_fetcher({"api.pexels.com/v1/search": payload})
        records = await PexelsProvider(fetcher, api_key="px").fetch(None, IMAGE)

        url, headers = fetcher.calls[0]
        assert "query=nature" in url
        assert "per_page=25" in url
        assert headers == {"Authorization": "px"}
        assert records[0].id == "pexels-1"
        assert records[0].title == "nature Photo"
        assert records[0].attribution.display_name == "Ann"

    @pytest.mark.asyncio
    async def test_videos_get_distinct_prefix(self, routed_fetcher):
        payload = {
            "videos": [
                {
                    "id": 7,
                    "image": "https://images.pexels.com/v7.jpg",
                    "user": {"name": "Bo"},
                    "video_files": [{"link": "https://videos.pexels.com/7.mp4"}],
                    "url": "https://www.pexels.com/video/7",
                },
                {"id": 8, "image": "https://images.pexels.com/v8.jpg", "video_files": []},
            ]
        }
        fetcher = routed_fetcher({"api.pexels.com/videos/search": payload})
        records = await PexelsProvider(fetcher, api_key="px").fetch("ocean", VIDEO)

        assert [r.id for r in records] == ["pexels-video-7", "pexels-video-8"]
        assert records[0].title == "Video by Bo"
        assert records[0].video_url == "https://videos.pexels.com/7.mp4"
        assert records[1].title == "Pexels Video"
        assert "per_page=15" in fetcher.urls()[0]

    @pytest.mark.asyncio
    async def test_no_key_no_call(self, fake_fetcher):
        assert await PexelsProvider(fake_fetcher).fetch("ocean", IMAGE) == []
        assert fake_fetcher.calls == []


class TestPixabayProvider:
    @pytest.mark.asyncio
    async def test_maps_hits_with_safesearch(self, routed_fetcher):
        payload = {
            "hits": [
                {
                    "id": 5,
                    "webformatURL": "https://cdn.pixabay.com/5.jpg",
                    "tags": "tree, forest",
                    "user": "u1",
                    "userImageURL": "https://cdn.pixabay.com/u1.png",
                    "pageURL": "https://pixabay.com/photos/5",
                }
            ]
        }
        fetcher = routed_fetcher({"pixabay.com/api": payload})
        records = await PixabayProvider(fetcher, api_key="pb").fetch("forest", IMAGE, SafetyLevel.RELAXED)

        assert "safesearch=true" in fetcher.urls()[0]
        assert records[0].id == "pixabay-5"
        assert records[0].title == "tree, forest"
        assert records[0].attribution.avatar_url == "https://cdn.pixabay.com/u1.png"

    @pytest.mark.asyncio
    async def test_images_only(self, fake_fetcher):
        assert await PixabayProvider(fake_fetcher, api_key="pb").fetch("forest", VIDEO) == []


class TestPicsumProvider:
    def test_generate_unique_ids(self, rng):
        records = PicsumProvider(rng=rng).generate(25)
        assert len(records) == 25
        assert len({r.id for r in records}) == 25
        assert all(r.source_tag == "Picsum" for r in records)
        assert all(r.thumbnail_url.endswith("/800/1200") for r in records)
        assert all(r.title == "Creative Inspiration" for r in records)

    def test_generate_bounds(self, rng):
        provider = PicsumProvider(rng=rng)
        assert provider.generate(0) == []
        assert len(provider.generate(5000)) == 1000

    @pytest.mark.asyncio
    async def test_fetch_trending_only(self, rng):
        provider = PicsumProvider(rng=rng)
        assert len(await provider.fetch(None, IMAGE)) == 10
        assert await provider.fetch("cats", IMAGE) == []


# =============================================================================
# Themed feeds
# =============================================================================


class TestThemedFeeds:
    @pytest.mark.asyncio
    async def test_nasa_skips_non_images(self, routed_fetcher):
        payload = [
            {
                "date": "2024-01-01",
                "url": "https://apod.nasa.gov/a.jpg",
                "hdurl": "https://apod.nasa.gov/a_hd.jpg",
                "title": "Nebula",
                "media_type": "image",
            },
            {"date": "2024-01-02", "url": "https://www.youtube.com/embed/x", "media_type": "video"},
        ]
        fetcher = routed_fetcher({"api.nasa.gov": payload})
        records = await NasaApodProvider(fetcher).fetch(None, IMAGE)

        assert "api_key=DEMO_KEY&count=10" in fetcher.urls()[0]
        assert [r.id for r in records] == ["nasa-2024-01-01"]
        assert records[0].external_link == "https://apod.nasa.gov/a_hd.jpg"
        assert (records[0].dimensions.height, records[0].dimensions.width) == (1080, 1920)

    @pytest.mark.asyncio
    async def test_dogs(self, routed_fetcher):
        payload = {"message": ["https://images.dog.ceo/breeds/husky/1.jpg", 42], "status": "success"}
        records = await DogProvider(routed_fetcher({"dog.ceo": payload})).fetch(None, IMAGE)

        assert len(records) == 1
        dog = records[0]
        assert dog.source_tag == "Dogs"
        assert dog.title == "Adorable Dog"
        assert dog.attribution.display_name == "Dog Lovers"
        assert (dog.dimensions.height, dog.dimensions.width) == (800, 600)

    @pytest.mark.asyncio
    async def test_cats(self, routed_fetcher):
        payload = [{"id": "c1", "url": "https://cdn2.thecatapi.com/c1.jpg", "width": 500, "height": 400}]
        records = await CatProvider(routed_fetcher({"thecatapi.com": payload})).fetch(None, IMAGE)

        assert records[0].id == "cat-c1"
        assert records[0].attribution.display_name == "Cat Lovers"
        assert (records[0].dimensions.height, records[0].dimensions.width) == (400, 500)

    @pytest.mark.asyncio
    async def test_feeds_ignore_queries(self, fake_fetcher):
        assert await DogProvider(fake_fetcher).fetch("dog", IMAGE) == []
        assert fake_fetcher.calls == []
