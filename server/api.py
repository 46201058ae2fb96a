"""FastAPI server exposing closet and outfit endpoints."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from closet_app.app import ClosetApp
from closet_app.errors import (
    AnalysisError,
    ClosetError,
    ConfigurationError,
    InsufficientWardrobeError,
    NotFoundError,
    RecommendationError,
    ValidationError,
    WeatherProviderError,
)
from closet_app.logging_config import get_logger, log_event
from logic.validation import WeatherSuitabilityPayload

LOGGER = get_logger(__name__)


class FeedbackRequest(BaseModel):
    """Feedback body; value checks happen in the orchestrator."""

    outfit_id: Optional[str] = None
    feedback: Optional[str] = None
    was_worn: Optional[bool] = None


class ItemUpdateRequest(BaseModel):
    item_type: Optional[str] = None
    color_primary: Optional[str] = None
    color_secondary: Optional[str] = None
    pattern: Optional[str] = None
    style: Optional[str] = None
    formality_level: Optional[int] = None
    weather_suitability: Optional[WeatherSuitabilityPayload] = None
    description: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    location_key: Optional[str] = Field(None, description="Zip code or city name")
    timezone: Optional[str] = None


class NotificationSettingsRequest(BaseModel):
    notification_time: Optional[str] = Field(None, description="HH:MM in the user's timezone; only the hour is matched")
    notification_enabled: Optional[bool] = None
    device_token: Optional[str] = None


class PhotoIngestRequest(BaseModel):
    """A closet photo already stored elsewhere, plus its bytes for analysis."""

    image_url: str
    image_base64: str
    mime_type: str = "image/jpeg"


def current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


def _error_response(status_code: int, message: str, field: str | None = None) -> JSONResponse:
    body = {"error": message}
    if field:
        body["field"] = field
    return JSONResponse(status_code=status_code, content=body)


def _register_error_handlers(api: FastAPI) -> None:
    @api.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return _error_response(400, exc.message, exc.field)

    @api.exception_handler(ConfigurationError)
    async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        return _error_response(400, exc.message)

    @api.exception_handler(InsufficientWardrobeError)
    async def _insufficient_wardrobe(request: Request, exc: InsufficientWardrobeError) -> JSONResponse:
        return _error_response(400, exc.message)

    @api.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_response(404, exc.message)

    @api.exception_handler(RecommendationError)
    async def _recommendation_error(request: Request, exc: RecommendationError) -> JSONResponse:
        return _error_response(502, "Failed to generate outfit recommendation")

    @api.exception_handler(WeatherProviderError)
    async def _weather_error(request: Request, exc: WeatherProviderError) -> JSONResponse:
        return _error_response(502, "Failed to fetch weather data")

    @api.exception_handler(AnalysisError)
    async def _analysis_error(request: Request, exc: AnalysisError) -> JSONResponse:
        return _error_response(502, "Failed to analyze clothing image")

    @api.exception_handler(ClosetError)
    async def _closet_error(request: Request, exc: ClosetError) -> JSONResponse:
        log_event(LOGGER, logging.ERROR, "unhandled_closet_error", error_type=type(exc).__name__)
        return _error_response(500, "Internal server error")


def create_api(closet_app: ClosetApp | None = None) -> FastAPI:
    """Build the FastAPI application around a wired :class:`ClosetApp`."""

    concierge = closet_app or ClosetApp()
    api = FastAPI(title="Closet Concierge", version="0.1.0")
    api.state.closet_app = concierge
    _register_error_handlers(api)

    @api.get("/healthz")
    def healthcheck() -> dict:
        """Lightweight readiness probe."""

        return {
            "status": "ok",
            "service": "closet-concierge",
            "environment": concierge.config.environment or "local",
            "model": concierge.config.model,
        }

    # -- outfits ---------------------------------------------------------

    @api.get("/outfits/daily")
    def daily_outfit(user_id: str = Depends(current_user_id)) -> dict:
        return concierge.orchestrator.get_or_create_daily_outfit(user_id).to_dict()

    @api.post("/outfits/regenerate")
    def regenerate_outfit(user_id: str = Depends(current_user_id)) -> dict:
        return concierge.orchestrator.regenerate_outfit(user_id).to_dict()

    @api.post("/outfits/feedback")
    def submit_feedback(request: FeedbackRequest, user_id: str = Depends(current_user_id)) -> dict:
        outfit = concierge.orchestrator.submit_feedback(
            user_id,
            request.outfit_id,
            feedback=request.feedback,
            was_worn=request.was_worn,
        )
        return outfit.to_dict()

    @api.get("/outfits/history")
    def outfit_history(limit: int = 30, offset: int = 0, user_id: str = Depends(current_user_id)) -> dict:
        outfits = concierge.orchestrator.list_history(user_id, limit=limit, offset=offset)
        return {"outfits": [outfit.to_dict() for outfit in outfits], "limit": limit, "offset": offset}

    # -- closet ----------------------------------------------------------

    @api.get("/closet/items")
    def list_items(user_id: str = Depends(current_user_id)) -> dict:
        items = concierge.wardrobe_store.list_active(user_id)
        return {"items": [item.to_dict() for item in items], "count": len(items)}

    @api.post("/closet/photos", status_code=201)
    def ingest_photo(request: PhotoIngestRequest, user_id: str = Depends(current_user_id)) -> dict:
        try:
            image_bytes = base64.b64decode(request.image_base64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError("image_base64 is not valid base64", field="image_base64") from exc
        items = concierge.ingest_photo(user_id, request.image_url, image_bytes, request.mime_type)
        return {"items": [item.to_dict() for item in items], "count": len(items)}

    @api.get("/closet/items/{item_id}")
    def get_item(item_id: str, user_id: str = Depends(current_user_id)) -> dict:
        item = concierge.wardrobe_store.get_item(user_id, item_id)
        if item is None:
            raise NotFoundError("Item not found")
        return item.to_dict()

    @api.put("/closet/items/{item_id}")
    def update_item(item_id: str, request: ItemUpdateRequest, user_id: str = Depends(current_user_id)) -> dict:
        updates = request.model_dump(exclude_none=True)
        try:
            item = concierge.wardrobe_store.update_item(user_id, item_id, updates)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if item is None:
            raise NotFoundError("Item not found")
        return item.to_dict()

    @api.delete("/closet/items/{item_id}")
    def delete_item(item_id: str, user_id: str = Depends(current_user_id)) -> dict:
        if not concierge.wardrobe_store.deactivate_item(user_id, item_id):
            raise NotFoundError("Item not found")
        return {"id": item_id, "is_active": False}

    # -- users -----------------------------------------------------------

    @api.get("/users/profile")
    def get_profile(user_id: str = Depends(current_user_id)) -> dict:
        profile = concierge.profile_store.get_profile(user_id)
        if profile is None:
            raise NotFoundError("User not found")
        return profile.to_dict()

    @api.put("/users/profile")
    def update_profile(request: ProfileUpdateRequest, user_id: str = Depends(current_user_id)) -> dict:
        profile = concierge.profile_store.upsert_profile(user_id, request.model_dump(exclude_none=True))
        return profile.to_dict()

    @api.put("/users/notifications")
    def update_notifications(
        request: NotificationSettingsRequest, user_id: str = Depends(current_user_id)
    ) -> dict:
        try:
            profile = concierge.profile_store.update_notification_settings(
                user_id,
                notification_time=request.notification_time,
                notification_enabled=request.notification_enabled,
                device_token=request.device_token,
            )
        except ValueError as exc:
            raise ValidationError(str(exc), field="notification_time") from exc
        return profile.to_dict()

    # -- weather ---------------------------------------------------------

    @api.get("/weather/current")
    def current_weather(user_id: str = Depends(current_user_id)) -> dict:
        profile = concierge.profile_store.get_profile(user_id)
        if profile is None or not profile.location_key:
            raise ConfigurationError("location not set")
        return concierge.weather_provider.current(profile.location_key).to_dict()

    return api


__all__ = ["create_api", "current_user_id"]
