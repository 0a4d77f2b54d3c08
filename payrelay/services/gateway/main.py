"""Public entrypoint for payment relay.

The gateway authenticates against the upstream processor with the configured
secret and relays each payment request as-is, mirroring the upstream status
and body back to the caller.
"""

from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from payrelay.common.config import CommonSettings, settings
from payrelay.common.logging import configure_logging, logger, payment_method_ctx, trace_id_ctx
from payrelay.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
    payment_requests_total,
)
from payrelay.common.startup import log_startup_config
from payrelay.common.tracing import instrument_app, setup_tracing
from payrelay.services.gateway.forwarder import ForwardError, PaymentForwarder, parse_json
from payrelay.services.gateway.schemas import body_payment_method, label_mismatch, metric_label


PAYMENT_ROUTE = "/api/payments/{method}"
BODYLESS_STATUSES = {204, 205, 304}
UNMATCHED_ROUTE = "unmatched"


class MalformedBody(Exception):
    """Request body is not valid JSON and cannot be relayed."""


async def read_json_body(request: Request):
    """Parse the raw request body; an empty body is the JSON value null."""

    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return parse_json(raw)
    except ValueError as exc:
        raise MalformedBody(str(exc)) from exc


def relay_response(status_code: int, body) -> Response:
    """Mirror an upstream status and JSON body; bodyless statuses stay bodyless.

    Upstream 3xx answers are not followed and arrive here as rejections, so
    their status and body are relayed without a `Location` header.
    """

    if status_code in BODYLESS_STATUSES:
        return Response(status_code=status_code)
    return JSONResponse(status_code=status_code, content=body)


def create_app(app_settings: CommonSettings, forwarder: PaymentForwarder | None = None) -> FastAPI:
    """Build the gateway app around one forwarder holding the upstream secret."""

    configure_logging(app_settings.service_name, app_settings.log_level)
    setup_tracing(
        app_settings.service_name,
        app_settings.otel_exporter_otlp_endpoint,
        enabled=app_settings.otel_enabled,
    )
    log_startup_config(app_settings)
    if forwarder is None:
        forwarder = PaymentForwarder(
            secret=app_settings.upstream_secret_key.get_secret_value(),
            upstream_url=app_settings.upstream_url,
            timeout=app_settings.upstream_timeout_seconds,
            service_name=app_settings.service_name,
        )

    app = FastAPI(title="PayRelay Gateway")
    app.state.forwarder = forwarder
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    instrument_app(app)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Record request count and latency for every HTTP call."""

        start = perf_counter()
        route = UNMATCHED_ROUTE
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=app_settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=app_settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()

    @app.exception_handler(ForwardError)
    async def forward_error_handler(_: Request, exc: ForwardError):
        return relay_response(exc.status_code, exc.body)

    @app.exception_handler(MalformedBody)
    async def malformed_body_handler(_: Request, exc: MalformedBody):
        logger.warning("rejected unparsable payment body: %s", exc)
        return JSONResponse(status_code=400, content={"message": "malformed JSON body"})

    @app.post(PAYMENT_ROUTE)
    async def create_payment(
        method: str,
        request: Request,
        x_correlation_id: str | None = Header(default=None),
    ):
        """Relay a payment to the upstream processor.

        `method` is only a label; the upstream picks the payment type from the
        body's `paymentMethod` field.
        """

        trace_id_ctx.set(x_correlation_id or str(uuid4()))
        payment_method_ctx.set(method)
        body = await read_json_body(request)
        if label_mismatch(method, body):
            logger.warning(
                "route label does not match body paymentMethod label=%s paymentMethod=%s",
                method,
                body_payment_method(body),
            )
        payment_requests_total.labels(
            service=app_settings.service_name,
            method=metric_label(method),
        ).inc()
        result = await request.app.state.forwarder.forward(method, body)
        return relay_response(result.status_code, result.body)

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    @app.get("/health")
    def health():
        """Liveness probe; never touches the upstream."""

        return {"status": "ok", "environment": app_settings.environment}

    return app


app = create_app(settings)


def run() -> None:
    """Serve the gateway with uvicorn on the configured host/port."""

    logger.info("payment gateway listening port=%s", settings.port)
    logger.info("payment endpoint http://localhost:%s%s", settings.port, PAYMENT_ROUTE)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
