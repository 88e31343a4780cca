#!/usr/bin/env python3
"""
HTTP adapter for the scaler
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
import uvicorn

from memorystore_autoscaler import __version__
from memorystore_autoscaler.core.scaler import Scaler
from .handlers import scale_cluster_http

logger = logging.getLogger(__name__)


class APIServer:
    """FastAPI server exposing the scaler over HTTP"""

    def __init__(self, scaler: Scaler):
        """
        Initialize API server

        Args:
            scaler: Scaler instance handling the requests
        """
        self.scaler = scaler
        self.app = FastAPI(
            title="Memorystore Cluster Autoscaler Scaler",
            description="Receives per-cluster scaling requests from the poller",
            version=__version__
        )
        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes"""

        @self.app.get("/health")
        def health_check():
            """Health check endpoint"""
            return JSONResponse(content={
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat()
            })

        @self.app.get("/metrics")
        def get_metrics():
            """Scaler counters in Prometheus text format"""
            return Response(
                content=generate_latest(self.scaler.counters.registry),
                media_type=CONTENT_TYPE_LATEST
            )

        @self.app.post("/scale")
        async def scale(request: Request):
            """Process one cluster scaling request"""
            try:
                payload = await request.json()
            except Exception as e:
                logger.error(f"Failed to parse http scaling request: {e}")
                self.scaler.counters.inc_requests_failed()
                return PlainTextResponse("An exception occurred", status_code=500)

            if await run_in_threadpool(scale_cluster_http, payload, self.scaler):
                return Response(status_code=200)
            return PlainTextResponse("An exception occurred", status_code=500)

    def run(self, host: str = "0.0.0.0", port: int = 8080):
        """Run the API server"""
        logger.info(f"Starting scaler API server on {host}:{port}")
        uvicorn.run(self.app, host=host, port=port, log_level="info")
