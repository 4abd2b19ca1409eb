import httpx

from vegmap.services.naver_review_service import (
    NaverReview,
    NaverReviewService,
    filter_reviews_by_keywords,
    highlight_keywords,
)


def test_filter_keeps_keyword_reviews_most_matches_first():
    reviews = [
        NaverReview(id="1", content="맛있는 반찬"),
        NaverReview(id="2", content="Great parking"),
        NaverReview(id="3", content="반찬 and a fresh salad with 나물"),
    ]

    result = filter_reviews_by_keywords(reviews)

    assert [r.id for r in result] == ["3", "1"]
    assert result[0].keyword_matches == 3
    assert "salad" in result[0].matched_keywords
    assert result[1].highlighted_content == "맛있는 <mark>반찬</mark>"


def test_filter_respects_limit():
    reviews = [NaverReview(id=str(i), content="salad") for i in range(15)]

    assert len(filter_reviews_by_keywords(reviews, limit=10)) == 10


def test_highlight_is_case_insensitive_and_escapes():
    assert highlight_keywords("Fresh Salad bar", ["salad"]) == "Fresh <mark>Salad</mark> bar"
    assert highlight_keywords("a+b", ["a+b"]) == "<mark>a+b</mark>"


async def test_unconfigured_service_returns_nothing():
    async with NaverReviewService(client_id="", client_secret="") as service:
        assert not service.is_configured
        assert await service.get_filtered_reviews("산촌") == []


async def test_fetch_parses_blog_items():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["X-Naver-Client-Id"] == "id"
        return httpx.Response(200, json={"items": [
            {
                "link": "https://blog.naver.com/x/1",
                "description": "<b>반찬</b>이 정말 &amp; 맛있어요",
                "bloggername": "veg",
                "postdate": "20240101",
            },
            {"link": "https://blog.naver.com/x/2", "description": "주차 편해요"},
        ]})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    async with NaverReviewService(client_id="id", client_secret="secret", client=client) as service:
        reviews = await service.get_filtered_reviews("산촌")

    assert len(reviews) == 1
    assert reviews[0].content == "반찬이 정말 & 맛있어요"
    assert reviews[0].author == "veg"
    assert reviews[0].to_dict()["highlighted_content"] == "<mark>반찬</mark>이 정말 &amp; 맛있어요"


async def test_http_error_returns_empty_list():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    async with NaverReviewService(client_id="id", client_secret="secret", client=client) as service:
        assert await service.get_filtered_reviews("산촌") == []
