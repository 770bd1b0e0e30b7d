"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict

from portal.domain.model import ContentItem, Course, MetadataOption
from portal.domain.value import (
    ContentId,
    CourseId,
    MetadataGroupKey,
    OptionId,
    OptionStatus,
    Slug,
)


def row_to_metadata_option(row: Dict[str, Any]) -> MetadataOption:
    """Convert database row to MetadataOption domain model.

    Args:
        row: Database row as dict

    Returns:
        MetadataOption domain model
    """
    return MetadataOption(
        option_id=OptionId(row["option_id"]),
        group_key=MetadataGroupKey(row["group_key"]),
        label=row["label"],
        slug=Slug(row["slug"]),
        sort_order=row["sort_order"],
        parent_id=OptionId(row["parent_id"]) if row.get("parent_id") else None,
        color=row.get("color"),
        short_description=row.get("short_description"),
        status=OptionStatus(row["status"]),
        archived_at=row.get("archived_at"),
        deleted_at=row.get("deleted_at"),
        created_at=row["created_at"],
        created_by=row["created_by"],
        updated_at=row["updated_at"],
        updated_by=row["updated_by"],
    )


def metadata_option_to_dict(option: MetadataOption) -> Dict[str, Any]:
    """Convert MetadataOption domain model to database dict.

    Args:
        option: MetadataOption domain model

    Returns:
        Dict suitable for database insertion/update
    """
    data = option.model_dump(mode="python")
    data["group_key"] = option.group_key.value
    data["status"] = option.status.value
    data["slug"] = option.slug.root
    return data


def row_to_course(row: Dict[str, Any]) -> Course:
    """Convert database row to Course domain model."""
    return Course(
        course_id=CourseId(row["course_id"]),
        title=row.get("title") or "",
        product_id=row.get("product_id"),
        product_suite_id=row.get("product_suite_id"),
        topic_tag_ids=list(row.get("topic_tag_ids") or []),
        audience_ids=list(row.get("audience_ids") or []),
        badge_ids=list(row.get("badge_ids") or []),
        product=row.get("product"),
        product_suite=row.get("product_suite"),
        legacy_product_suite=row.get("legacy_product_suite"),
        legacy_product_concept=row.get("legacy_product_concept"),
        topic_tags=list(row.get("topic_tags") or []),
        updated_at=row.get("updated_at"),
    )


def course_to_dict(course: Course) -> Dict[str, Any]:
    """Convert Course domain model to database dict."""
    return course.model_dump(mode="python")


def row_to_content_item(row: Dict[str, Any]) -> ContentItem:
    """Convert database row to ContentItem domain model."""
    return ContentItem(
        content_id=ContentId(row["content_id"]),
        title=row.get("title") or "",
        product_id=row.get("product_id"),
        product_suite_id=row.get("product_suite_id"),
        topic_tag_ids=list(row.get("topic_tag_ids") or []),
        audience_ids=list(row.get("audience_ids") or []),
        product=row.get("product"),
        product_suite=row.get("product_suite"),
        legacy_product_suite=row.get("legacy_product_suite"),
        legacy_product_concept=row.get("legacy_product_concept"),
        tags=list(row.get("tags") or []),
        updated_at=row.get("updated_at"),
    )


def content_item_to_dict(item: ContentItem) -> Dict[str, Any]:
    """Convert ContentItem domain model to database dict."""
    return item.model_dump(mode="python")
