"""FastAPI surface for the moderation engine.

Endpoints called by the Shared Thread application:
- POST /moderate     moderate a ContentSubmission
- POST /spam-check   unified spam check for any content kind
- GET  /metrics      Prometheus exposition
"""

from __future__ import annotations

from typing import Dict, Optional

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from shared_thread_moderation.config import load_config
from shared_thread_moderation.models.result import ModerationResult
from shared_thread_moderation.models.submission import ContentSubmission
from shared_thread_moderation.services.moderation_service import ModerationEngine
from shared_thread_moderation.services.spam_detector import ContentToCheck, SpamDetector


def create_app(engine: Optional[ModerationEngine] = None) -> FastAPI:
    app = FastAPI(title="Shared Thread Moderation API", version="1.0.0")
    app.state.engine = engine or ModerationEngine(config=load_config())
    app.state.spam_detector = SpamDetector(app.state.engine)

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/moderate", response_model=ModerationResult)
    async def moderate(submission: ContentSubmission, request: Request) -> ModerationResult:
        return await request.app.state.engine.moderate(submission)

    @app.post("/spam-check")
    async def spam_check(item: ContentToCheck, request: Request) -> Dict:
        result = await request.app.state.spam_detector.check(item)
        return {
            "isSpam": result.is_spam,
            "confidence": result.confidence,
            "reasons": result.reasons,
            "shouldBlock": result.should_block,
            "shouldFlag": result.should_flag,
            "category": result.category.value,
        }

    @app.get("/metrics")
    def prometheus_metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
