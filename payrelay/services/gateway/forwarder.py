"""Authenticated pass-through of payment requests to the upstream processor.

One POST per call, no retries. The caller gets the upstream status and body
back untouched; only a missing response is turned into a generic 500.
"""

import base64
import json
from dataclasses import dataclass
from typing import Any

import httpx

from payrelay.common.logging import logger
from payrelay.common.metrics import (
    payment_failure_total,
    payment_latency_seconds,
    payment_success_total,
)


INTERNAL_ERROR_BODY = {"message": "internal error processing payment"}


class ForwardError(Exception):
    """Failure that still maps onto a response for the caller."""

    def __init__(self, status_code: int, body: Any) -> None:
        super().__init__(f"payment forwarding failed (status={status_code})")
        self.status_code = status_code
        self.body = body


class UpstreamRejection(ForwardError):
    """Upstream answered with a non-2xx status."""


class TransportFailure(ForwardError):
    """No response was obtained from upstream."""

    def __init__(self, reason: str) -> None:
        super().__init__(500, dict(INTERNAL_ERROR_BODY))
        self.reason = reason


@dataclass(frozen=True)
class ForwardResult:
    """Upstream success relayed to the caller."""

    status_code: int
    body: Any


def build_auth_headers(secret: str) -> dict[str, str]:
    """Basic-Auth headers with the secret as username and an empty password."""

    token = base64.b64encode(f"{secret}:".encode("utf-8")).decode("ascii")
    return {
        "Authorization": f"Basic {token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def parse_json(raw: bytes | str) -> Any:
    """Strict JSON decode; NaN and Infinity are rejected like any other invalid token."""

    return json.loads(raw, parse_constant=_reject_constant)


def decode_body(resp: httpx.Response) -> Any:
    """JSON body when parseable, raw text otherwise, None when empty."""

    if not resp.content:
        return None
    try:
        return parse_json(resp.content)
    except ValueError:
        return resp.text


class PaymentForwarder:
    """Relays payment bodies to one fixed upstream endpoint."""

    def __init__(
        self,
        secret: str,
        upstream_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
        service_name: str = "payrelay-gateway",
    ) -> None:
        self._secret = secret
        self.upstream_url = upstream_url
        self.timeout = timeout
        self.transport = transport
        self.service_name = service_name

    def __repr__(self) -> str:
        return f"PaymentForwarder(upstream_url={self.upstream_url!r})"

    async def forward(self, method: str, body: Any) -> ForwardResult:
        """Send `body` upstream and return its 2xx answer.

        Raises `UpstreamRejection` for non-2xx answers and `TransportFailure`
        when no response arrives at all.
        """

        logger.info("payment request received method=%s", method)
        headers = build_auth_headers(self._secret)
        try:
            with payment_latency_seconds.labels(service=self.service_name).time():
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                    resp = await client.post(
                        self.upstream_url,
                        headers=headers,
                        content=json.dumps(body, allow_nan=False),
                    )
        except httpx.RequestError as exc:
            payment_failure_total.labels(service=self.service_name, reason="transport_failure").inc()
            logger.error("upstream unreachable method=%s error=%s", method, exc)
            raise TransportFailure(str(exc)) from exc

        payload = decode_body(resp)
        if resp.is_success:
            payment_success_total.labels(service=self.service_name).inc()
            tx_id = payload.get("id") if isinstance(payload, dict) else None
            logger.info("upstream accepted payment method=%s transaction_id=%s", method, tx_id)
            return ForwardResult(status_code=resp.status_code, body=payload)

        payment_failure_total.labels(service=self.service_name, reason="upstream_rejection").inc()
        if payload is None:
            logger.error(
                "upstream rejected payment method=%s status=%s with empty body",
                method,
                resp.status_code,
            )
            raise UpstreamRejection(resp.status_code, dict(INTERNAL_ERROR_BODY))
        logger.error(
            "upstream rejected payment method=%s status=%s body=%s",
            method,
            resp.status_code,
            json.dumps(payload, default=str),
        )
        raise UpstreamRejection(resp.status_code, payload)
