"""initial_schema

Create the taxonomy schema for the enablement portal:
- Metadata options (controlled vocabularies for five groups)
- Courses and content items (reference columns rewritten by merge/migration)

Revision ID: 3f1c9a7b2d10
Revises:
Create Date: 2026-09-28 10:12:41.518204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f1c9a7b2d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False, default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        nullable=nullable,
        server_default=sa.text("NOW()") if default else None,
    )


def _text_array(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.ARRAY(sa.Text()),
        nullable=False,
        server_default=sa.text("'{}'"),
    )


def upgrade() -> None:
    """Upgrade schema."""
    # ========================================================================
    # METADATA_OPTIONS table
    # ========================================================================
    op.create_table(
        "metadata_options",
        sa.Column("option_id", sa.String(64), nullable=False),
        sa.Column("group_key", sa.String(32), nullable=False),
        sa.Column("label", sa.Text(), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("parent_id", sa.String(64), nullable=True),
        sa.Column("color", sa.String(32), nullable=True),
        sa.Column("short_description", sa.String(140), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        _timestamp("archived_at", nullable=True, default=False),
        _timestamp("deleted_at", nullable=True, default=False),
        _timestamp("created_at"),
        sa.Column("created_by", sa.String(255), nullable=False),
        _timestamp("updated_at"),
        sa.Column("updated_by", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("option_id"),
        sa.UniqueConstraint("group_key", "slug", name="uq_metadata_options_group_slug"),
        sa.CheckConstraint(
            "group_key IN ('product', 'product_suite', 'topic_tag', 'badge', 'audience')",
            name="check_metadata_options_group_key",
        ),
        sa.CheckConstraint(
            "status IN ('active', 'archived')", name="check_metadata_options_status"
        ),
        sa.CheckConstraint("sort_order >= 0", name="check_metadata_options_sort_order"),
    )
    op.create_index(
        "idx_metadata_options_listing",
        "metadata_options",
        ["group_key", "sort_order", "label", "option_id"],
    )
    op.create_index(
        "idx_metadata_options_parent_id", "metadata_options", ["parent_id"]
    )

    # ========================================================================
    # COURSES table
    # ========================================================================
    op.create_table(
        "courses",
        sa.Column("course_id", sa.String(64), nullable=False),
        sa.Column("title", sa.Text(), nullable=False, server_default=""),
        sa.Column("product_id", sa.String(64), nullable=True),
        sa.Column("product_suite_id", sa.String(64), nullable=True),
        _text_array("topic_tag_ids"),
        _text_array("audience_ids"),
        _text_array("badge_ids"),
        sa.Column("product", sa.Text(), nullable=True),
        sa.Column("product_suite", sa.Text(), nullable=True),
        sa.Column("legacy_product_suite", sa.Text(), nullable=True),
        sa.Column("legacy_product_concept", sa.Text(), nullable=True),
        _text_array("topic_tags"),
        _timestamp("updated_at", nullable=True, default=False),
        sa.PrimaryKeyConstraint("course_id"),
    )
    op.create_index("idx_courses_product_id", "courses", ["product_id"])
    op.create_index("idx_courses_product_suite_id", "courses", ["product_suite_id"])

    # ========================================================================
    # CONTENT_ITEMS table
    # ========================================================================
    op.create_table(
        "content_items",
        sa.Column("content_id", sa.String(64), nullable=False),
        sa.Column("title", sa.Text(), nullable=False, server_default=""),
        sa.Column("product_id", sa.String(64), nullable=True),
        sa.Column("product_suite_id", sa.String(64), nullable=True),
        _text_array("topic_tag_ids"),
        _text_array("audience_ids"),
        sa.Column("product", sa.Text(), nullable=True),
        sa.Column("product_suite", sa.Text(), nullable=True),
        sa.Column("legacy_product_suite", sa.Text(), nullable=True),
        sa.Column("legacy_product_concept", sa.Text(), nullable=True),
        _text_array("tags"),
        _timestamp("updated_at", nullable=True, default=False),
        sa.PrimaryKeyConstraint("content_id"),
    )
    op.create_index("idx_content_items_product_id", "content_items", ["product_id"])
    op.create_index(
        "idx_content_items_product_suite_id", "content_items", ["product_suite_id"]
    )

    # Array containment lookups for usage counts and merge rewrites
    for table, columns in (
        ("courses", ("topic_tag_ids", "audience_ids", "badge_ids")),
        ("content_items", ("topic_tag_ids", "audience_ids")),
    ):
        for column in columns:
            op.create_index(
                f"idx_{table}_{column}",
                table,
                [column],
                postgresql_using="gin",
            )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("content_items")
    op.drop_table("courses")
    op.drop_table("metadata_options")
