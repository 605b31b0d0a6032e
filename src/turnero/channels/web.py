"""Web chat channel adapter using FastAPI."""

import asyncio
import logging
from typing import Optional

from ..models import IncomingMessage, OutgoingMessage
from .base import ChannelAdapter, MessageHandler

logger = logging.getLogger(__name__)

MAX_SENDER_ID_LENGTH = 64
MAX_TEXT_LENGTH = 500


class WebAdapter(ChannelAdapter):
    """FastAPI-based chat endpoint. Replies are returned in the HTTP response."""

    def __init__(self, config: dict, on_message: MessageHandler):
        super().__init__(config, on_message)
        self.host = config.get("host", "0.0.0.0")
        port = int(config.get("port", 8080))
        if not (1 <= port <= 65535):
            raise ValueError(f"Invalid web port: {port}. Must be 1-65535.")
        self.port = port
        self.allowed_origins = config.get("allowed_origins", [])
        self._server = None
        self._task: Optional[asyncio.Task] = None

    @property
    def name(self) -> str:
        return "web"

    def build_app(self):
        try:
            from fastapi import FastAPI, HTTPException
            from fastapi.middleware.cors import CORSMiddleware
            from pydantic import BaseModel
        except ImportError:
            raise ImportError(
                "fastapi/uvicorn not installed. Run: pip install turnero[web]"
            )

        adapter = self
        app = FastAPI(title="turnero", version="0.1.0")
        if adapter.allowed_origins:
            app.add_middleware(
                CORSMiddleware,
                allow_origins=adapter.allowed_origins,
                allow_methods=["GET", "POST"],
                allow_headers=["Content-Type"],
            )

        class MessageRequest(BaseModel):
            sender_id: str
            sender_name: str = "Cliente"
            text: str
            is_group: bool = False

        class MessageResponse(BaseModel):
            reply: Optional[str] = None

        @app.post("/api/messages", response_model=MessageResponse)
        async def handle_message(req: MessageRequest):
            if not req.sender_id or len(req.sender_id) > MAX_SENDER_ID_LENGTH:
                raise HTTPException(status_code=400, detail="Invalid sender_id")
            if len(req.text) > MAX_TEXT_LENGTH:
                raise HTTPException(
                    status_code=400,
                    detail=f"Message too long (max {MAX_TEXT_LENGTH} characters)",
                )
            msg = IncomingMessage(
                channel="web",
                sender_id=req.sender_id,
                sender_name=req.sender_name[:100],
                text=req.text,
                is_group=req.is_group,
            )
            try:
                response = await adapter.on_message(msg)
            except Exception as e:
                logger.error(f"Error handling web message: {e}", exc_info=True)
                raise HTTPException(status_code=500, detail="Internal error") from None
            return MessageResponse(reply=response.text if response else None)

        @app.get("/health")
        async def health():
            return {"status": "ok", "session": adapter.state.value}

        return app

    async def _start(self) -> None:
        import uvicorn

        app = self.build_app()
        config = uvicorn.Config(app, host=self.host, port=self.port, log_level="info")
        self._server = uvicorn.Server(config)
        logger.info(f"Web adapter starting on {self.host}:{self.port}")
        self._task = asyncio.create_task(self._server.serve())

    async def _stop(self) -> None:
        if self._server:
            self._server.should_exit = True
        if self._task:
            await self._task
            self._task = None
        logger.info("Web adapter stopped")

    async def send_message(self, sender_id: str, message: OutgoingMessage) -> None:
        logger.warning("Web adapter does not support push messages")
