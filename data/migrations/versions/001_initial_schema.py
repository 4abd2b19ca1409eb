"""Initial schema: users, restaurants and activity tracking tables

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("auth_provider_id", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_auth_provider_id", "users", ["auth_provider_id"], unique=True)

    op.create_table(
        "restaurants",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name_en", sa.String(length=255), nullable=False),
        sa.Column("name_ko", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("address_en", sa.String(length=500), nullable=False),
        sa.Column("address_ko", sa.String(length=500), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("menu_items", sa.JSON(), nullable=True),
        sa.Column("operating_hours", sa.JSON(), nullable=True),
        sa.Column("price_range", sa.String(length=16), nullable=True),
        sa.Column("description_en", sa.Text(), nullable=True),
        sa.Column("description_ko", sa.Text(), nullable=True),
        sa.Column("naver_place_id", sa.String(length=64), nullable=True),
        sa.Column("offers_side_dish_only", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("ordering_tips_en", sa.Text(), nullable=True),
        sa.Column("ordering_tips_ko", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "category IN ('vegetarian', 'vegan', 'vegetarian-friendly')",
            name="ck_restaurants_category",
        ),
        sa.CheckConstraint(
            "price_range IS NULL OR price_range IN ('budget', 'mid-range', 'upscale')",
            name="ck_restaurants_price_range",
        ),
    )
    op.create_index("ix_restaurants_category", "restaurants", ["category"])

    op.create_table(
        "restaurant_photos",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("restaurant_id", sa.String(length=36), sa.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("storage_path", sa.String(length=500), nullable=False),
        sa.Column("caption_en", sa.String(length=500), nullable=True),
        sa.Column("caption_ko", sa.String(length=500), nullable=True),
        sa.Column("uploaded_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("photo_type", sa.String(length=16), nullable=False, server_default="restaurant"),
    )
    op.create_index("ix_restaurant_photos_restaurant_id", "restaurant_photos", ["restaurant_id"])

    op.create_table(
        "restaurant_side_dish_notes",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("restaurant_id", sa.String(length=36), sa.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("side_dish_name_ko", sa.String(length=255), nullable=False),
        sa.Column("side_dish_name_en", sa.String(length=255), nullable=True),
        sa.Column("description_en", sa.Text(), nullable=True),
        sa.Column("description_ko", sa.Text(), nullable=True),
        sa.Column("is_vegetarian", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_vegan", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("ordering_phrase_ko", sa.String(length=500), nullable=True),
        sa.Column("ordering_phrase_en", sa.String(length=500), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_restaurant_side_dish_notes_restaurant_id", "restaurant_side_dish_notes", ["restaurant_id"])

    op.create_table(
        "restaurant_edit_suggestions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("restaurant_id", sa.String(length=36), sa.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("suggested_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("field_name", sa.String(length=64), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("reviewed_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_restaurant_edit_suggestions_restaurant_id", "restaurant_edit_suggestions", ["restaurant_id"])
    op.create_index("ix_restaurant_edit_suggestions_status", "restaurant_edit_suggestions", ["status"])
    op.create_index(
        "ix_restaurant_edit_suggestions_status_created",
        "restaurant_edit_suggestions",
        ["status", "created_at"],
    )

    op.create_table(
        "user_visits",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("session_id", sa.String(length=64), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("page_views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("restaurants_viewed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("searches_performed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("referrer", sa.String(length=500), nullable=True),
    )
    op.create_index("ix_user_visits_user_id", "user_visits", ["user_id"])
    op.create_index("ix_user_visits_session_id", "user_visits", ["session_id"])
    op.create_index("ix_user_visits_started_at", "user_visits", ["started_at"])
    op.create_index("ix_user_visits_session_started", "user_visits", ["session_id", "started_at"])

    op.create_table(
        "restaurant_views",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("restaurant_id", sa.String(length=36), sa.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("session_id", sa.String(length=64), nullable=False),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=True),
    )
    op.create_index("ix_restaurant_views_restaurant_id", "restaurant_views", ["restaurant_id"])
    op.create_index("ix_restaurant_views_user_id", "restaurant_views", ["user_id"])
    op.create_index("ix_restaurant_views_session_id", "restaurant_views", ["session_id"])
    op.create_index("ix_restaurant_views_viewed_at", "restaurant_views", ["viewed_at"])
    op.create_index("ix_restaurant_views_user_viewed", "restaurant_views", ["user_id", "viewed_at"])

    op.create_table(
        "search_queries",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("session_id", sa.String(length=64), nullable=False),
        sa.Column("query_text", sa.String(length=500), nullable=False),
        sa.Column("filter_category", sa.String(length=32), nullable=True),
        sa.Column("results_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("searched_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_search_queries_user_id", "search_queries", ["user_id"])
    op.create_index("ix_search_queries_session_id", "search_queries", ["session_id"])
    op.create_index("ix_search_queries_searched_at", "search_queries", ["searched_at"])
    op.create_index("ix_search_queries_user_searched", "search_queries", ["user_id", "searched_at"])


def downgrade() -> None:
    op.drop_table("search_queries")
    op.drop_table("restaurant_views")
    op.drop_table("user_visits")
    op.drop_table("restaurant_edit_suggestions")
    op.drop_table("restaurant_side_dish_notes")
    op.drop_table("restaurant_photos")
    op.drop_table("restaurants")
    op.drop_table("users")
