"""Test configuration and fixtures."""

import os
from datetime import UTC, datetime
from uuid import uuid4

import logfire
import pytest
from fastapi.testclient import TestClient

from portal.domain.model import ContentItem, Course, MetadataOption
from portal.domain.value import (
    ContentId,
    CourseId,
    MetadataGroupKey,
    OptionId,
    OptionStatus,
    Slug,
)
from portal.interface.api.app import create_app
from portal.persistence.repository.inmemory import InMemoryStore
from tests.di import build_test_container

# Keep test runs local: console off, nothing sent
logfire.configure(send_to_logfire=False, console=False)

# API tests authenticate with dev headers; read by every Settings() built later
os.environ.setdefault("AUTH__ALLOW_DEV_HEADERS", "true")

ADMIN_HEADERS = {"x-dev-role": "Admin", "x-dev-user-id": "admin-1"}
VIEWER_HEADERS = {"x-dev-role": "Viewer", "x-dev-user-id": "viewer-1"}


def make_option(
    label: str,
    group_key: MetadataGroupKey = MetadataGroupKey.TOPIC_TAG,
    slug: str | None = None,
    sort_order: int = 0,
    parent_id: str | None = None,
    status: OptionStatus = OptionStatus.ACTIVE,
    deleted_at: datetime | None = None,
) -> MetadataOption:
    """Build an option with sensible defaults for seeding repositories."""
    now = datetime.now(UTC)
    return MetadataOption(
        option_id=OptionId(str(uuid4())),
        group_key=group_key,
        label=label,
        slug=Slug(slug) if slug else Slug.from_label(label),
        sort_order=sort_order,
        parent_id=OptionId(parent_id) if parent_id else None,
        status=status,
        archived_at=now if status == OptionStatus.ARCHIVED else None,
        deleted_at=deleted_at,
        created_at=now,
        created_by="seed",
        updated_at=now,
        updated_by="seed",
    )


def make_course(course_id: str | None = None, **fields) -> Course:
    """Build a course; keyword arguments set reference and legacy fields."""
    return Course(course_id=CourseId(course_id or f"course-{uuid4()}"), **fields)


def make_content_item(content_id: str | None = None, **fields) -> ContentItem:
    """Build a content item; keyword arguments set reference and legacy fields."""
    return ContentItem(
        content_id=ContentId(content_id or f"content-{uuid4()}"), **fields
    )


@pytest.fixture
def client():
    """Test client over an app wired to in-memory persistence.

    Every test gets its own container, so data never leaks between tests.
    """
    return TestClient(create_app(container=build_test_container()))


@pytest.fixture
def api():
    """Test client plus the in-memory store behind it.

    Courses and content items have no endpoints of their own, so tests write
    them straight into the store.
    """
    container = build_test_container()
    with TestClient(create_app(container=container)) as client:
        store = client.portal.call(container.get, InMemoryStore)
        yield client, store
