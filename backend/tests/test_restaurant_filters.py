from vegmap.services.restaurant_filters import (
    FilterOptions,
    apply_filters,
    filter_by_price,
    sort_restaurants,
)

A = {"name_en": "A", "name_ko": "나", "category": "vegan", "price_range": "budget"}
B = {"name_en": "B", "name_ko": "가", "category": "vegetarian", "price_range": "upscale"}


def test_category_filter():
    assert apply_filters([A, B], FilterOptions(categories=["vegan"])) == [A]


def test_no_filters_returns_everything_sorted_by_name():
    assert apply_filters([B, A], FilterOptions()) == [A, B]


def test_korean_name_sort():
    assert sort_restaurants([A, B], "name", language="ko") == [B, A]


def test_name_sort_ignores_case():
    lower = {"name_en": "apple"}
    upper = {"name_en": "Banana"}

    assert sort_restaurants([upper, lower], "name") == [lower, upper]


def test_price_sort_puts_unset_first():
    unpriced = {"name_en": "C", "category": "vegan", "price_range": None}
    mid = {"name_en": "D", "category": "vegan", "price_range": "mid-range"}

    assert sort_restaurants([B, mid, unpriced, A], "price") == [unpriced, A, mid, B]


def test_selecting_every_price_range_keeps_unpriced():
    unpriced = {"name_en": "C", "price_range": None}

    result = filter_by_price([A, unpriced], ["budget", "mid-range", "upscale"])

    assert result == [A, unpriced]


def test_price_filter_drops_unpriced():
    unpriced = {"name_en": "C", "price_range": None}

    assert filter_by_price([A, B, unpriced], ["upscale"]) == [B]


def test_feature_filters():
    side = dict(A, offers_side_dish_only=True, is_verified=False)
    verified = dict(B, offers_side_dish_only=False, is_verified=True)

    assert apply_filters([side, verified], FilterOptions(side_dish_only=True)) == [side]
    assert apply_filters([side, verified], FilterOptions(verified=True)) == [verified]


def test_text_search_matches_names_and_addresses():
    a = dict(A, address_en="Insadong, Seoul", address_ko="서울 종로구")
    b = dict(B, address_en="Itaewon, Seoul", address_ko="서울 용산구")

    assert apply_filters([a, b], FilterOptions(), search="INSADONG") == [a]
    assert apply_filters([a, b], FilterOptions(), search="insadong, ") == [a]
    assert apply_filters([a, b], FilterOptions(), search="용산") == [b]
    assert apply_filters([a, b], FilterOptions(), search="   ") == [a, b]


def test_text_search_keeps_surrounding_spaces():
    a = dict(A, address_en="Insadong, Seoul", address_ko="서울 종로구")

    assert apply_filters([a], FilterOptions(), search=" insadong") == []
    assert apply_filters([a], FilterOptions(), search=" seoul") == [a]


def test_works_on_objects():
    class Row:
        def __init__(self, **kw):
            self.__dict__.update(kw)

    row = Row(name_en="X", name_ko="엑스", category="vegan", price_range=None)

    assert apply_filters([row], FilterOptions(categories=["vegan"])) == [row]
