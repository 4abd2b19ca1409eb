from vegmap.models.user import User
from vegmap.models.restaurant import Restaurant, RestaurantPhoto, SideDishNote, RestaurantEditSuggestion
from vegmap.models.user_visit import UserVisit
from vegmap.models.restaurant_view import RestaurantView
from vegmap.models.search_query import SearchQuery

__all__ = [
    "User",
    "Restaurant",
    "RestaurantPhoto",
    "SideDishNote",
    "RestaurantEditSuggestion",
    "UserVisit",
    "RestaurantView",
    "SearchQuery",
]
