"""
Naver reviews for a restaurant, filtered down to the ones that talk about
side dishes and vegetables. Reviews are fetched live and never stored.
"""
import httpx
import html
import re
import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Optional, List
import os

logger = logging.getLogger(__name__)

REVIEW_KEYWORDS = {
    "ko": ["반찬", "나물", "채소", "야채", "무침", "볶음", "샐러드"],
    "en": ["vegetable", "side dish", "banchan", "namul", "salad"],
}
MAX_REVIEWS = 10

_TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class NaverReview:
    id: str
    content: str
    rating: Optional[float] = None
    author: Optional[str] = None
    date: Optional[str] = None
    url: Optional[str] = None
    keyword_matches: int = 0
    matched_keywords: List[str] = field(default_factory=list)
    highlighted_content: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def filter_reviews_by_keywords(reviews: List[NaverReview], limit: int = MAX_REVIEWS) -> List[NaverReview]:
    """Keep reviews mentioning any keyword, most matches first"""
    keywords = REVIEW_KEYWORDS["ko"] + REVIEW_KEYWORDS["en"]

    matched = []
    for review in reviews:
        content = review.content.lower()
        hits = [k for k in keywords if k.lower() in content]
        if not hits:
            continue
        review.keyword_matches = len(hits)
        review.matched_keywords = hits
        review.highlighted_content = highlight_keywords(html.escape(review.content), hits)
        matched.append(review)

    matched.sort(key=lambda r: r.keyword_matches, reverse=True)
    return matched[:limit]


def highlight_keywords(text: str, keywords: List[str]) -> str:
    """Wrap every case-insensitive keyword occurrence in <mark>"""
    highlighted = text
    for keyword in keywords:
        highlighted = re.sub(f"({re.escape(keyword)})", r"<mark>\1</mark>", highlighted, flags=re.IGNORECASE)
    return highlighted


class NaverReviewService:
    """Naver Open API blog search used as the review source"""

    BASE_URL = "https://openapi.naver.com/v1/search/blog.json"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.client_id = client_id or os.getenv("NAVER_CLIENT_ID")
        self.client_secret = client_secret or os.getenv("NAVER_CLIENT_SECRET")
        self.client = client or httpx.AsyncClient(timeout=10.0)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def fetch_reviews(self, query: str, display: int = 50) -> List[NaverReview]:
        if not self.is_configured:
            logger.info("Naver API credentials not configured; skipping review lookup")
            return []

        response = await self.client.get(
            self.BASE_URL,
            params={"query": f"{query} 후기", "display": display, "sort": "sim"},
            headers={
                "X-Naver-Client-Id": self.client_id,
                "X-Naver-Client-Secret": self.client_secret,
            },
        )
        response.raise_for_status()
        data = response.json()

        reviews = []
        for item in data.get("items", []):
            link = item.get("link", "")
            reviews.append(NaverReview(
                id=link,
                content=html.unescape(_TAG_RE.sub("", item.get("description", ""))),
                author=item.get("bloggername"),
                date=item.get("postdate"),
                url=link,
            ))
        return reviews

    async def get_filtered_reviews(self, query: str) -> List[NaverReview]:
        """Relevant reviews for a restaurant name; [] when the lookup fails"""
        try:
            reviews = await self.fetch_reviews(query)
        except Exception as e:
            logger.error(f"Error fetching Naver reviews for '{query}': {e}")
            return []
        return filter_reviews_by_keywords(reviews)
