"""
Sample data for local development: a few Seoul restaurants and side-dish notes.

    python -m vegmap.database.seeds
"""
import asyncio
import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from vegmap.database.connection import AsyncSessionLocal
from vegmap.models.restaurant import Restaurant, SideDishNote

logger = logging.getLogger(__name__)

RESTAURANTS = [
    {
        "name_en": "Sanchon",
        "name_ko": "산촌",
        "category": "vegetarian",
        "address_en": "14 Insadong-gil 30beon-gil, Jongno-gu, Seoul",
        "address_ko": "서울 종로구 인사동길 30-13",
        "latitude": 37.5742,
        "longitude": 126.9852,
        "price_range": "upscale",
        "description_en": "Temple cuisine set menus prepared by a former monk.",
        "description_ko": "스님 출신 셰프의 사찰음식 코스.",
        "offers_side_dish_only": False,
        "is_verified": True,
    },
    {
        "name_en": "Plant Cafe",
        "name_ko": "플랜트",
        "category": "vegan",
        "address_en": "117 Bogwang-ro, Yongsan-gu, Seoul",
        "address_ko": "서울 용산구 보광로 117",
        "latitude": 37.5347,
        "longitude": 126.9946,
        "price_range": "mid-range",
        "offers_side_dish_only": False,
        "is_verified": True,
    },
    {
        "name_en": "Gwangjang Bindaetteok",
        "name_ko": "광장 빈대떡",
        "category": "vegetarian-friendly",
        "address_en": "88 Changgyeonggung-ro, Jongno-gu, Seoul",
        "address_ko": "서울 종로구 창경궁로 88",
        "latitude": 37.5701,
        "longitude": 126.9996,
        "price_range": "budget",
        "offers_side_dish_only": True,
        "ordering_tips_en": "Ask for the mung bean pancake without pork.",
        "ordering_tips_ko": "고기 빼고 녹두전 주세요.",
        "is_verified": False,
    },
]

SIDE_DISHES = {
    "Gwangjang Bindaetteok": [
        {
            "side_dish_name_ko": "콩나물무침",
            "side_dish_name_en": "Seasoned bean sprouts",
            "is_vegetarian": True,
            "is_vegan": True,
            "ordering_phrase_ko": "콩나물무침 더 주세요.",
            "ordering_phrase_en": "More bean sprouts, please.",
            "is_verified": True,
        },
    ],
}


async def seed_restaurants(db: AsyncSession) -> int:
    created = 0
    for data in RESTAURANTS:
        existing = await db.execute(select(Restaurant).where(Restaurant.name_en == data["name_en"]))
        restaurant = existing.scalar_one_or_none()
        if restaurant is None:
            restaurant = Restaurant(**data)
            db.add(restaurant)
            await db.flush()
            created += 1
            for note in SIDE_DISHES.get(data["name_en"], []):
                db.add(SideDishNote(restaurant_id=restaurant.id, **note))

    await db.commit()
    return created


async def main() -> None:
    async with AsyncSessionLocal() as db:
        created = await seed_restaurants(db)
    logger.info(f"Seeded {created} restaurants")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
