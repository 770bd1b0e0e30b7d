"""SQLAlchemy table definitions for the portal taxonomy.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# METADATA OPTIONS TABLE (controlled vocabularies)
# ============================================================================
metadata_options_table = Table(
    "metadata_options",
    metadata,
    Column("option_id", String(64), primary_key=True),
    Column("group_key", String(32), nullable=False),
    Column("label", Text, nullable=False),
    Column("slug", String(100), nullable=False),
    Column("sort_order", Integer, nullable=False, server_default="0"),
    Column("parent_id", String(64), nullable=True),  # No FK: parents may be deleted
    Column("color", String(32), nullable=True),
    Column("short_description", String(140), nullable=True),
    Column("status", String(16), nullable=False, server_default="active"),
    Column("archived_at", TIMESTAMP(timezone=True), nullable=True),
    Column("deleted_at", TIMESTAMP(timezone=True), nullable=True),
    Column(
        "created_at",
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("NOW()"),
    ),
    Column("created_by", String(255), nullable=False),
    Column(
        "updated_at",
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("NOW()"),
    ),
    Column("updated_by", String(255), nullable=False),
    UniqueConstraint("group_key", "slug", name="uq_metadata_options_group_slug"),
    CheckConstraint(
        "group_key IN ('product', 'product_suite', 'topic_tag', 'badge', 'audience')",
        name="check_metadata_options_group_key",
    ),
    CheckConstraint(
        "status IN ('active', 'archived')", name="check_metadata_options_status"
    ),
    CheckConstraint("sort_order >= 0", name="check_metadata_options_sort_order"),
)

Index(
    "idx_metadata_options_listing",
    metadata_options_table.c.group_key,
    metadata_options_table.c.sort_order,
    metadata_options_table.c.label,
    metadata_options_table.c.option_id,
)
Index("idx_metadata_options_parent_id", metadata_options_table.c.parent_id)

# ============================================================================
# COURSES TABLE (owned by the LMS; taxonomy rewrites reference columns only)
# ============================================================================
courses_table = Table(
    "courses",
    metadata,
    Column("course_id", String(64), primary_key=True),
    Column("title", Text, nullable=False, server_default=""),
    # Canonical references
    Column("product_id", String(64), nullable=True),
    Column("product_suite_id", String(64), nullable=True),
    Column("topic_tag_ids", ARRAY(Text), nullable=False, server_default="{}"),
    Column("audience_ids", ARRAY(Text), nullable=False, server_default="{}"),
    Column("badge_ids", ARRAY(Text), nullable=False, server_default="{}"),
    # Legacy free-text values
    Column("product", Text, nullable=True),
    Column("product_suite", Text, nullable=True),
    Column("legacy_product_suite", Text, nullable=True),
    Column("legacy_product_concept", Text, nullable=True),
    Column("topic_tags", ARRAY(Text), nullable=False, server_default="{}"),
    Column("updated_at", TIMESTAMP(timezone=True), nullable=True),
)

Index("idx_courses_product_id", courses_table.c.product_id)
Index("idx_courses_product_suite_id", courses_table.c.product_suite_id)

# ============================================================================
# CONTENT ITEMS TABLE (owned by the content hub)
# ============================================================================
content_items_table = Table(
    "content_items",
    metadata,
    Column("content_id", String(64), primary_key=True),
    Column("title", Text, nullable=False, server_default=""),
    # Canonical references
    Column("product_id", String(64), nullable=True),
    Column("product_suite_id", String(64), nullable=True),
    Column("topic_tag_ids", ARRAY(Text), nullable=False, server_default="{}"),
    Column("audience_ids", ARRAY(Text), nullable=False, server_default="{}"),
    # Legacy free-text values
    Column("product", Text, nullable=True),
    Column("product_suite", Text, nullable=True),
    Column("legacy_product_suite", Text, nullable=True),
    Column("legacy_product_concept", Text, nullable=True),
    Column("tags", ARRAY(Text), nullable=False, server_default="{}"),
    Column("updated_at", TIMESTAMP(timezone=True), nullable=True),
)

Index("idx_content_items_product_id", content_items_table.c.product_id)
Index("idx_content_items_product_suite_id", content_items_table.c.product_suite_id)
