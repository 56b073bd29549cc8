"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from zoneinfo import ZoneInfo

from fastapi import FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse

from food_journal.api.models import AnalyzeRequest, ProfileRequest
from food_journal.app_logging import configure_logging
from food_journal.containers import AppContainer
from food_journal.domain.entries import FoodEntry, NutritionVector, Provenance
from food_journal.domain.errors import (
    AnalysisBusyError,
    AnalysisError,
    AnalysisInputError,
    ProfileMissingError,
)
from food_journal.domain.insights import DaySummary, RangeSummary, TimeRange
from food_journal.domain.profile import UserProfile
from food_journal.services.analysis import to_data_url
from food_journal.services.calendar import from_epoch_ms, parse_day_key
from food_journal.services.journal import MutationResult


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(AnalysisInputError)
    async def input_error(_: Request, exc: AnalysisInputError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)},
        )

    @app.exception_handler(AnalysisBusyError)
    async def busy_error(_: Request, exc: AnalysisBusyError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(AnalysisError)
    async def analysis_error(_: Request, exc: AnalysisError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": str(exc)}
        )

    @app.exception_handler(ProfileMissingError)
    async def profile_missing(_: Request, exc: ProfileMissingError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        """Return the journal owner's profile and streak."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.journal_service.profile
        if profile is None:
            raise ProfileMissingError("No profile yet. Create one first.")
        return {"profile": _profile_payload(profile)}

    @app.post("/profile", status_code=status.HTTP_201_CREATED)
    async def create_profile(
        body: ProfileRequest, request: Request
    ) -> dict[str, object]:
        """Create the profile during onboarding."""
        state_container: AppContainer = request.app.state.container
        result = state_container.journal_service.create_profile(body.name)
        return _mutation_payload(result, state_container.timezone)

    @app.get("/journal")
    async def journal(request: Request, day: str | None = None) -> dict[str, object]:
        """Return one local day's entries and totals, today by default."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.journal_service.day_summary(_parse_day(day))
        profile = state_container.journal_service.profile
        payload = _day_payload(summary, state_container.timezone)
        payload["streak"] = profile.streak if profile else 0
        return payload

    @app.post("/entries/analyze", status_code=status.HTTP_201_CREATED)
    async def analyze_entry(
        body: AnalyzeRequest, request: Request
    ) -> dict[str, object]:
        """Analyze a meal and log it once the analysis succeeds."""
        state_container: AppContainer = request.app.state.container
        image_bytes = _decode_image(body.image_base64)
        try:
            result = await state_container.analysis_service.analyze(
                body.mode, image_bytes=image_bytes, text=body.text
            )
        except AnalysisError:
            logger.exception("Food analysis failed", extra={"mode": body.mode.value})
            raise
        mutation = state_container.journal_service.add_analysis(
            result,
            Provenance(body.mode.value),
            image_url=to_data_url(image_bytes) if image_bytes else None,
            meal_slot=body.meal_slot,
        )
        return _mutation_payload(mutation, state_container.timezone)

    @app.post("/entries/water", status_code=status.HTTP_201_CREATED)
    async def quick_water(request: Request) -> dict[str, object]:
        """Log a glass of water."""
        state_container: AppContainer = request.app.state.container
        result = state_container.journal_service.add_quick_water()
        return _mutation_payload(result, state_container.timezone)

    @app.delete("/entries/{entry_id}")
    async def delete_entry(entry_id: str, request: Request) -> dict[str, object]:
        """Delete an entry; unknown ids report ``deleted: false``."""
        state_container: AppContainer = request.app.state.container
        result = state_container.journal_service.delete(entry_id)
        payload = _mutation_payload(result, state_container.timezone)
        payload["deleted"] = result.changed
        return payload

    @app.get("/insights")
    async def insights(
        request: Request, time_range: str = Query(default="1W", alias="range")
    ) -> dict[str, object]:
        """Return the daily series and totals for a lookback window."""
        state_container: AppContainer = request.app.state.container
        time_window = _parse_range(time_range)
        summary = state_container.insights_service.get_range(time_window)
        return _range_payload(summary)

    @app.get("/export")
    async def export(
        request: Request, time_range: str = Query(default="1W", alias="range")
    ) -> Response:
        """Download the entries of a lookback window as CSV."""
        state_container: AppContainer = request.app.state.container
        filename, content = state_container.insights_service.export_report(
            _parse_range(time_range)
        )
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app


def _parse_day(raw: str | None) -> date | None:
    if raw is None:
        return None
    try:
        return parse_day_key(raw)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Day must be formatted as YYYY-MM-DD.",
        ) from exc


def _parse_range(raw: str) -> TimeRange:
    try:
        return TimeRange.from_label(raw)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc


def _decode_image(raw: str | None) -> bytes | None:
    if not raw:
        return None
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AnalysisInputError("The attached image is not valid base64.") from exc


def _nutrition_payload(nutrition: NutritionVector) -> dict[str, float]:
    return {
        "calories": nutrition.calories,
        "protein": nutrition.protein_g,
        "carbs": nutrition.carbs_g,
        "fat": nutrition.fat_g,
        "fiber": nutrition.fiber_g,
        "sugar": nutrition.sugar_g,
        "water": nutrition.water_ml,
    }


def _entry_payload(entry: FoodEntry, tz: ZoneInfo) -> dict[str, object]:
    return {
        "id": entry.id,
        "name": entry.name,
        "description": entry.description,
        "health_tip": entry.health_tip,
        "timestamp": entry.timestamp_ms,
        "logged_at": from_epoch_ms(entry.timestamp_ms, tz).isoformat(),
        "nutrition": _nutrition_payload(entry.nutrition),
        "source": entry.provenance.value,
        "meal_type": entry.meal_slot.value,
        "image_url": entry.image_url,
    }


def _profile_payload(profile: UserProfile) -> dict[str, object]:
    return {
        "name": profile.name,
        "streak": profile.streak,
        "last_log_day": profile.last_log_day,
    }


def _mutation_payload(result: MutationResult, tz: ZoneInfo) -> dict[str, object]:
    return {
        "entry": _entry_payload(result.entry, tz) if result.entry else None,
        "profile": _profile_payload(result.profile) if result.profile else None,
        "persisted": result.persisted,
        "warning": result.warning,
    }


def _day_payload(summary: DaySummary, tz: ZoneInfo) -> dict[str, object]:
    return {
        "day": summary.day.isoformat(),
        "entries": [_entry_payload(entry, tz) for entry in summary.entries],
        "totals": _nutrition_payload(summary.totals),
        "calorie_goal": summary.calorie_goal,
        "goal_percent": summary.goal_percent,
    }


def _range_payload(summary: RangeSummary) -> dict[str, object]:
    return {
        "range": summary.time_range.label,
        "start_day": summary.start_day.isoformat(),
        "end_day": summary.end_day.isoformat(),
        "daily": [
            {
                "day": bucket.key,
                "label": bucket.label,
                "calories": bucket.calories,
                "water": bucket.water_ml,
            }
            for bucket in summary.daily
        ],
        "totals": _nutrition_payload(summary.totals),
        "average_daily_calories": summary.average_daily_calories,
        "macro_distribution": {
            share.name.lower(): share.grams for share in summary.macro_distribution
        },
        "entry_count": len(summary.entries),
    }
