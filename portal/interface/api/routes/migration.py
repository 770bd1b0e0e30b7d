"""Legacy metadata migration routes (Admin)."""

import logfire
from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request

from portal.application.usecase.migration import (
    ApplyMigrationRequest,
    ApplyMigrationResponse,
    ApplyMigrationUseCase,
    ScanLegacyValuesRequest,
    ScanLegacyValuesResponse,
    ScanLegacyValuesUseCase,
)
from portal.domain.value import LegacyKey
from portal.interface.api.auth import AdminUser
from portal.interface.api.schemas import Envelope, envelope

router = APIRouter(
    prefix="/v1/metadata/migration",
    tags=["metadata-migration"],
    route_class=DishkaRoute,
)


@router.get(
    "/scan",
    response_model=Envelope[ScanLegacyValuesResponse],
    summary="Scan Courses and Content for legacy metadata values",
)
async def scan_legacy_values(
    request: Request,
    user: AdminUser,
    use_case: FromDishka[ScanLegacyValuesUseCase],
    key: LegacyKey | None = None,
) -> Envelope:
    """Bucket legacy free-text values by distinct value.

    Walks both tables; `complete=false` means the batch budget ran out.

    Example:
        GET /v1/metadata/migration/scan?key=topic_tags
    """
    with logfire.span(
        "api.scan_legacy_values", user_id=user.user_id, key=key.value if key else None
    ):
        result = await use_case.execute(ScanLegacyValuesRequest(key=key))
        return envelope(request, result)


@router.post(
    "/apply",
    response_model=Envelope[ApplyMigrationResponse],
    summary="Map legacy values onto canonical option IDs",
)
async def apply_migration(
    request: Request,
    body: ApplyMigrationRequest,
    user: AdminUser,
    use_case: FromDishka[ApplyMigrationUseCase],
) -> Envelope:
    """Fill empty canonical fields from a legacy value -> option_id mapping.

    Existing canonical values are never overwritten, so this is safe to
    re-run. Use `dry_run` to preview counts.

    Example:
        POST /v1/metadata/migration/apply
        {"topic_tags": {"Onboarding": "<option_id>"}, "dry_run": true}
    """
    with logfire.span(
        "api.apply_migration", user_id=user.user_id, dry_run=body.dry_run
    ):
        result = await use_case.execute(body)
        return envelope(request, result)
