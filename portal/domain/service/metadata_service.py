"""Metadata taxonomy domain service."""

import base64
import uuid
from datetime import UTC, datetime
from typing import Any

import logfire
from pydantic import BaseModel

from portal.config import MetadataSettings
from portal.domain.error import (
    ConflictError,
    InvalidMergeError,
    NotFoundError,
    OptionInUseError,
    ValidationError,
)
from portal.domain.model import MetadataOption, OptionUsage
from portal.domain.repository import MetadataOptionRepository, OptionFilter, OptionKey
from portal.domain.value import MetadataGroupKey, OptionId, OptionStatus, Slug

from .base import Service
from .reference_service import ReferenceService

MAX_DESCRIPTION_LENGTH = 140

# Fields PATCH may touch; anything else is ignored
UPDATABLE_FIELDS = frozenset(
    {
        "label",
        "slug",
        "sort_order",
        "parent_id",
        "color",
        "short_description",
        "status",
        "archived_at",
        "deleted_at",
    }
)


def encode_cursor(key: OptionKey) -> str:
    """Encode a keyset position as an opaque url-safe token."""
    raw = key.model_dump_json().encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def decode_cursor(cursor: str) -> OptionKey:
    """Decode a token produced by `encode_cursor`.

    Raises:
        ValidationError: If the token is not a cursor this service issued
    """
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        raw = base64.urlsafe_b64decode(padded.encode())
        return OptionKey.model_validate_json(raw)
    except ValueError as e:
        raise ValidationError("Invalid cursor") from e


class OptionListPage(BaseModel):
    """Options in listing order, plus the cursor for the next page."""

    options: list[MetadataOption]
    next_cursor: str | None = None


class MergeResult(BaseModel):
    """Outcome of merging one option into another."""

    source: MetadataOption
    target: MetadataOption
    migrated_courses: int
    migrated_resources: int


class MetadataService(Service):
    """Domain service for controlled-vocabulary options.

    Options are never removed: delete sets `deleted_at`, archive sets
    `status`. Slugs are unique within a group, deleted options included.
    """

    def __init__(
        self,
        option_repository: MetadataOptionRepository,
        reference_service: ReferenceService,
        settings: MetadataSettings,
    ) -> None:
        """Initialize metadata service.

        Args:
            option_repository: Metadata option repository
            reference_service: Service for Course/Content references
            settings: Metadata settings (page sizes)
        """
        self.option_repository = option_repository
        self.reference_service = reference_service
        self.settings = settings

    def clamp_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.settings.list_default_limit
        return max(1, min(limit, self.settings.list_max_limit))

    async def _resolve_parent_scope(
        self, group_key: MetadataGroupKey, parent_id: OptionId | None
    ) -> OptionId | None:
        """Drop the parent filter when nothing in the group would match it.

        Happens while a group is partway onto the hierarchy: every option
        has some other parent.
        """
        if not parent_id:
            return None
        in_scope = await self.option_repository.find_page(
            OptionFilter(
                group_key=group_key,
                include_archived=True,
                include_deleted=True,
                parent_id=parent_id,
                limit=1,
            )
        )
        if in_scope.items:
            return parent_id
        logfire.info(
            "No options in parent scope, listing whole group",
            group_key=group_key.value,
            parent_id=parent_id,
        )
        return None

    async def list_options(
        self,
        group_key: MetadataGroupKey,
        query: str | None = None,
        include_archived: bool = False,
        include_deleted: bool = False,
        parent_id: OptionId | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> OptionListPage:
        """List a group's options ordered by sort_order, then label.

        Args:
            group_key: Group to list
            query: Case-insensitive substring of label or slug
            include_archived: Include archived options
            include_deleted: Include soft-deleted options
            parent_id: Restrict to children of this option plus unparented
                options; the whole group when neither exists
            limit: Page size, clamped to the configured range
            cursor: Token from a previous page's `next_cursor`

        Returns:
            Page of options

        Raises:
            ValidationError: If the cursor is malformed
        """
        with logfire.span(
            "metadata_service.list_options",
            group_key=group_key.value,
            query=query,
            include_archived=include_archived,
        ):
            option_filter = OptionFilter(
                group_key=group_key,
                query=query.strip() if query and query.strip() else None,
                include_archived=include_archived,
                include_deleted=include_deleted,
                parent_id=await self._resolve_parent_scope(group_key, parent_id),
                limit=self.clamp_limit(limit),
                after=decode_cursor(cursor) if cursor else None,
            )
            page = await self.option_repository.find_page(option_filter)

            next_cursor = None
            if page.has_more and page.items:
                last = page.items[-1]
                next_cursor = encode_cursor(
                    OptionKey(
                        sort_order=last.sort_order,
                        label=last.label,
                        option_id=last.option_id,
                    )
                )

            logfire.info(
                "Options listed",
                group_key=group_key.value,
                count=len(page.items),
                has_more=page.has_more,
            )
            return OptionListPage(options=page.items, next_cursor=next_cursor)

    async def get_option(self, option_id: OptionId) -> MetadataOption:
        """Get an option by ID, deleted or not.

        Raises:
            NotFoundError: If no option has this ID
        """
        with logfire.span("metadata_service.get_option", option_id=option_id):
            option = await self.option_repository.find_by_id(option_id)
            if option is None:
                logfire.warn("Option not found", option_id=option_id)
                raise NotFoundError("Metadata option", option_id)
            return option

    async def get_option_in_group(
        self, group_key: MetadataGroupKey, option_id: OptionId
    ) -> MetadataOption:
        """Get an option that must belong to `group_key`.

        An option of another group is reported as not found, so a route's
        group segment cannot be used to reach options outside it.
        """
        option = await self.get_option(option_id)
        if option.group_key != group_key:
            logfire.warn(
                "Option requested through another group",
                option_id=option_id,
                group_key=group_key.value,
                actual_group_key=option.group_key.value,
            )
            raise NotFoundError("Metadata option", option_id)
        return option

    def _parse_slug(self, value: Any) -> Slug:
        try:
            return Slug(value)
        except ValueError as e:
            raise ValidationError(
                "slug must be lowercase letters, digits and single hyphens",
                details={"field": "slug"},
            ) from e

    def _check_label(self, label: Any) -> str:
        if not isinstance(label, str) or not label.strip():
            raise ValidationError("label is required", details={"field": "label"})
        return label.strip()

    def _check_description(self, description: str | None) -> None:
        if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"short_description must be at most {MAX_DESCRIPTION_LENGTH} characters",
                details={"field": "short_description"},
            )

    async def _check_slug_free(
        self,
        group_key: MetadataGroupKey,
        slug: Slug,
        option_id: OptionId | None = None,
    ) -> None:
        existing = await self.option_repository.find_by_slug(group_key, slug)
        if existing is not None and existing.option_id != option_id:
            logfire.warn(
                "Slug already taken",
                group_key=group_key.value,
                slug=str(slug),
                existing_option_id=existing.option_id,
            )
            raise ConflictError(
                f"An option with slug '{slug}' already exists in {group_key.value}"
            )

    async def _check_parent(
        self,
        group_key: MetadataGroupKey,
        parent_id: OptionId,
        option_id: OptionId | None = None,
    ) -> None:
        if parent_id == option_id:
            raise ValidationError(
                "An option cannot be its own parent", details={"field": "parent_id"}
            )
        parent = await self.option_repository.find_by_id(parent_id)
        if parent is None or parent.is_deleted:
            raise ValidationError(
                f"Parent option {parent_id} not found", details={"field": "parent_id"}
            )
        # Products hang off product suites
        if (
            group_key == MetadataGroupKey.PRODUCT
            and parent.group_key != MetadataGroupKey.PRODUCT_SUITE
        ):
            raise ValidationError(
                "Product parent must be a product suite",
                details={"field": "parent_id"},
            )

    async def create_option(
        self,
        group_key: MetadataGroupKey,
        label: str,
        created_by: str,
        slug: str | None = None,
        sort_order: int = 0,
        parent_id: OptionId | None = None,
        color: str | None = None,
        short_description: str | None = None,
    ) -> MetadataOption:
        """Create an option in a group.

        The slug is derived from the label when not given.

        Args:
            group_key: Group of the new option
            label: Display label (required)
            created_by: User creating the option
            slug: Explicit slug
            sort_order: Display position
            parent_id: Parent option (products: a product suite)
            color: Display color
            short_description: Description, at most 140 characters

        Returns:
            Created option

        Raises:
            ValidationError: If a field is invalid or the parent is unusable
            ConflictError: If the slug is already used in the group
        """
        with logfire.span(
            "metadata_service.create_option",
            group_key=group_key.value,
            label=label,
            created_by=created_by,
        ):
            label = self._check_label(label)
            self._check_description(short_description)
            if sort_order < 0:
                raise ValidationError(
                    "sort_order must be zero or greater", details={"field": "sort_order"}
                )

            if slug:
                option_slug = self._parse_slug(slug)
            else:
                try:
                    option_slug = Slug.from_label(label)
                except ValueError as e:
                    raise ValidationError(
                        "Cannot derive a slug from this label; provide one explicitly",
                        details={"field": "slug"},
                    ) from e

            await self._check_slug_free(group_key, option_slug)
            if parent_id:
                await self._check_parent(group_key, parent_id)

            now = datetime.now(UTC)
            option = MetadataOption(
                option_id=OptionId(str(uuid.uuid4())),
                group_key=group_key,
                label=label,
                slug=option_slug,
                sort_order=sort_order,
                parent_id=parent_id or None,
                color=color,
                short_description=short_description,
                status=OptionStatus.ACTIVE,
                created_at=now,
                created_by=created_by,
                updated_at=now,
                updated_by=created_by,
            )
            saved = await self.option_repository.save(option)
            logfire.info(
                "Option created",
                option_id=saved.option_id,
                group_key=group_key.value,
                slug=str(saved.slug),
            )
            return saved

    async def update_option(
        self, option_id: OptionId, changes: dict[str, Any], updated_by: str
    ) -> MetadataOption:
        """Apply a partial update.

        Only keys present in `changes` are touched; a key mapped to None
        clears that field. `archived_at` and `deleted_at` accept a timestamp
        (archive / soft-delete) or None (unarchive / restore). `status` wins
        over `archived_at` when both are present.

        Args:
            option_id: Option to update
            changes: Field -> new value, for provided fields only
            updated_by: User making the change

        Returns:
            Updated option

        Raises:
            NotFoundError: If the option does not exist
            ValidationError: If a field is invalid
            ConflictError: If a new slug is already used in the group
        """
        with logfire.span(
            "metadata_service.update_option",
            option_id=option_id,
            fields=sorted(changes),
            updated_by=updated_by,
        ):
            option = await self.get_option(option_id)
            changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
            update: dict[str, Any] = {}
            now = datetime.now(UTC)

            if "label" in changes:
                update["label"] = self._check_label(changes["label"])

            if "slug" in changes:
                slug = self._parse_slug(changes["slug"])
                await self._check_slug_free(option.group_key, slug, option.option_id)
                update["slug"] = slug

            if "sort_order" in changes:
                sort_order = changes["sort_order"]
                if sort_order is None or sort_order < 0:
                    raise ValidationError(
                        "sort_order must be zero or greater",
                        details={"field": "sort_order"},
                    )
                update["sort_order"] = sort_order

            if "parent_id" in changes:
                parent_id = changes["parent_id"] or None
                if parent_id is not None:
                    await self._check_parent(option.group_key, parent_id, option.option_id)
                update["parent_id"] = parent_id

            if "color" in changes:
                update["color"] = changes["color"]

            if "short_description" in changes:
                self._check_description(changes["short_description"])
                update["short_description"] = changes["short_description"]

            if "status" in changes:
                status = changes["status"]
                if status is None:
                    raise ValidationError(
                        "status cannot be cleared", details={"field": "status"}
                    )
                status = OptionStatus(status)
                update["status"] = status
                if status == OptionStatus.ARCHIVED:
                    update["archived_at"] = option.archived_at or now
                else:
                    update["archived_at"] = None
            elif "archived_at" in changes:
                archived_at = changes["archived_at"]
                update["archived_at"] = archived_at
                update["status"] = (
                    OptionStatus.ARCHIVED if archived_at else OptionStatus.ACTIVE
                )

            if "deleted_at" in changes:
                update["deleted_at"] = changes["deleted_at"]

            update["updated_at"] = now
            update["updated_by"] = updated_by
            updated = option.model_copy(update=update)
            saved = await self.option_repository.save(updated)

            logfire.info(
                "Option updated",
                option_id=option_id,
                status=saved.status.value,
                deleted=saved.is_deleted,
            )
            return saved

    async def get_usage(
        self, group_key: MetadataGroupKey, option_id: OptionId
    ) -> OptionUsage:
        """Count references to an option of `group_key`.

        Raises:
            NotFoundError: If the option does not exist in the group
            BatchBudgetExceededError: If the tables could not be walked in budget
        """
        with logfire.span(
            "metadata_service.get_usage",
            group_key=group_key.value,
            option_id=option_id,
        ):
            await self.get_option_in_group(group_key, option_id)
            return await self.reference_service.get_usage(group_key, option_id)

    async def delete_option(
        self,
        group_key: MetadataGroupKey,
        option_id: OptionId,
        deleted_by: str,
        force: bool = False,
    ) -> MetadataOption:
        """Soft-delete an option, refusing while it is referenced.

        Args:
            group_key: Group the option must belong to
            option_id: Option to delete
            deleted_by: User deleting the option
            force: Delete even if Courses or Content still reference it

        Returns:
            Deleted option

        Raises:
            NotFoundError: If the option does not exist in the group
            OptionInUseError: If referenced and not forced
        """
        with logfire.span(
            "metadata_service.delete_option",
            group_key=group_key.value,
            option_id=option_id,
            force=force,
        ):
            option = await self.get_option_in_group(group_key, option_id)

            if not force:
                usage = await self.reference_service.get_usage(group_key, option_id)
                if usage.total > 0:
                    logfire.warn(
                        "Delete blocked: option in use",
                        option_id=option_id,
                        used_by_courses=usage.used_by_courses,
                        used_by_resources=usage.used_by_resources,
                    )
                    raise OptionInUseError(
                        option_id=option_id,
                        used_by_courses=usage.used_by_courses,
                        used_by_resources=usage.used_by_resources,
                        sample_course_ids=usage.sample_course_ids,
                        sample_resource_ids=usage.sample_resource_ids,
                    )

            if option.is_deleted:
                logfire.info("Option already deleted", option_id=option_id)
                return option

            now = datetime.now(UTC)
            deleted = option.model_copy(
                update={"deleted_at": now, "updated_at": now, "updated_by": deleted_by}
            )
            saved = await self.option_repository.save(deleted)
            logfire.info("Option deleted", option_id=option_id, forced=force)
            return saved

    async def merge_options(
        self,
        group_key: MetadataGroupKey,
        source_id: OptionId,
        target_id: OptionId,
        merged_by: str,
        delete_source: bool = False,
    ) -> MergeResult:
        """Move every reference from source to target, then retire the source.

        All validation happens before any entity is rewritten. The source is
        archived, or soft-deleted when `delete_source` is set, only after
        every reference has been moved.

        Args:
            group_key: Group the source option must belong to
            source_id: Option being merged away
            target_id: Option that absorbs the references
            merged_by: User performing the merge
            delete_source: Soft-delete the source instead of archiving it

        Returns:
            Both options and the number of entities rewritten

        Raises:
            NotFoundError: If either option does not exist
            InvalidMergeError: If the options cannot be merged
            BatchBudgetExceededError: If the tables could not be walked in budget
        """
        with logfire.span(
            "metadata_service.merge_options",
            group_key=group_key.value,
            source_id=source_id,
            target_id=target_id,
            delete_source=delete_source,
        ):
            if source_id == target_id:
                raise InvalidMergeError("Cannot merge an option into itself")

            source = await self.get_option(source_id)
            target = await self.get_option(target_id)

            if source.group_key != group_key:
                raise InvalidMergeError(
                    f"Source option belongs to {source.group_key.value}, "
                    f"not {group_key.value}"
                )
            if source.group_key != target.group_key:
                logfire.warn(
                    "Cross-group merge rejected",
                    source_group=source.group_key.value,
                    target_group=target.group_key.value,
                )
                raise InvalidMergeError(
                    "Cannot merge options from different groups "
                    f"({source.group_key.value} into {target.group_key.value})"
                )
            if target.is_deleted:
                raise InvalidMergeError("Cannot merge into a deleted option")

            migrated_courses, migrated_resources = (
                await self.reference_service.repoint_references(
                    group_key, source_id, target_id
                )
            )

            now = datetime.now(UTC)
            retire: dict[str, Any] = {"updated_at": now, "updated_by": merged_by}
            if delete_source:
                retire["deleted_at"] = source.deleted_at or now
            else:
                retire["status"] = OptionStatus.ARCHIVED
                retire["archived_at"] = source.archived_at or now
            retired = await self.option_repository.save(source.model_copy(update=retire))

            logfire.info(
                "Options merged",
                source_id=source_id,
                target_id=target_id,
                migrated_courses=migrated_courses,
                migrated_resources=migrated_resources,
                source_deleted=delete_source,
            )
            return MergeResult(
                source=retired,
                target=target,
                migrated_courses=migrated_courses,
                migrated_resources=migrated_resources,
            )
