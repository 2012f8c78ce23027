"""FastAPI application for the Messenger shopping bot."""

from __future__ import annotations

import json
import logging

from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from src.audit.logger import AuditLogger
from src.backend.client import BackendClient
from src.bot import links
from src.bot.cart import cart_products
from src.bot.dispatcher import Dispatcher
from src.bot.image_pipeline import ImagePipeline
from src.bot.responder import Responder
from src.config import BotConfig
from src.models import AuditEvent, AuditEventType
from src.webhook.messenger import MessengerWebhook

logger = logging.getLogger(__name__)

# Shown on the store page until the user's profile location is known
DEFAULT_STORE_USER_ID = "1721196817934442"
DEFAULT_STORE_LOCATION = {"lat": -37.8136, "lng": 144.9631}
DEFAULT_STORE_ADDRESS = "Sao Paulo, Brazil"


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    config = BotConfig.from_env()
    config.ensure_complete()
    audit_logger = AuditLogger.from_env(config.audit_log_path) if config.audit_log_path else None
    return create_app(config, audit_logger)


def create_app(
    config: BotConfig,
    audit_logger: AuditLogger | None = None,
    dispatcher: Dispatcher | None = None,
    backend: BackendClient | None = None,
) -> FastAPI:
    """Create the bot app wired to one configuration object."""
    app = FastAPI(docs_url=None, redoc_url=None)
    backend = backend or BackendClient(config)
    if dispatcher is None:
        responder = Responder(config, audit_logger)
        pipeline = ImagePipeline(config, responder, backend, audit_logger)
        dispatcher = Dispatcher(config, responder, pipeline)
    webhook = MessengerWebhook(config.verify_token)

    def audit(event: AuditEvent) -> None:
        if audit_logger:
            audit_logger.log(event)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/webhook")
    async def verify_webhook(request: Request) -> Response:
        result = webhook.handle_verification(dict(request.query_params))
        verified = result["status_code"] == 200
        audit(AuditEvent(
            event_type=(
                AuditEventType.WEBHOOK_VERIFIED if verified
                else AuditEventType.WEBHOOK_REJECTED
            ),
            action="verify",
            result="success" if verified else "rejected",
            details={"mode": request.query_params.get("hub.mode")},
        ))
        if verified:
            return PlainTextResponse(result["content"])
        return Response(status_code=403)

    @app.post("/webhook")
    async def receive_webhook(
        request: Request, background_tasks: BackgroundTasks,
    ) -> Response:
        if not config.base_url_initialized:
            config.init_base_url(request.headers.get("host", ""))

        try:
            body = json.loads(await request.body())
        except ValueError:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
        if not isinstance(body, dict) or not webhook.is_page_subscription(body):
            return Response(status_code=404)

        try:
            events = webhook.extract_events(body)
        except ValidationError as e:
            logger.warning("Rejected malformed webhook delivery: %s", e)
            return JSONResponse({"error": "Invalid webhook event"}, status_code=400)

        for event in events:
            logger.debug("Webhook event: %s", event.model_dump(exclude_none=True))
            audit(AuditEvent(
                event_type=AuditEventType.EVENT_RECEIVED,
                sender_id=event.sender_id,
                action="postback" if event.postback is not None else "message",
                result="success",
            ))
            # Reply delivery runs after the acknowledgment is sent
            background_tasks.add_task(dispatcher.handle, event)

        return PlainTextResponse("EVENT_RECEIVED")

    @app.get("/web/Products")
    async def view_products(data: str | None = None) -> JSONResponse:
        if not data:
            return JSONResponse(
                {"error": "No data passed in the URL parameters"},
                status_code=500,
            )
        try:
            view = links.decode_data(data)
        except links.InvalidLinkDataError as e:
            return JSONResponse({"error": str(e)}, status_code=400)
        return JSONResponse(links.products_page_data(view))

    @app.get("/web/Store")
    async def view_store(user_id: str = DEFAULT_STORE_USER_ID) -> JSONResponse:
        address = DEFAULT_STORE_ADDRESS
        result = await backend.fetch_user_location(user_id)
        if result.ok and isinstance(result.data, dict):
            location = result.data.get("location")
            if isinstance(location, dict) and location.get("name"):
                address = location["name"]
        else:
            logger.info("User location unavailable for %s: %s", user_id, result.message)
        return JSONResponse({"location": DEFAULT_STORE_LOCATION, "address": address})

    @app.get("/web/ShoppingCart")
    async def view_cart() -> JSONResponse:
        return JSONResponse({"products": [p.to_wire() for p in cart_products()]})

    return app
