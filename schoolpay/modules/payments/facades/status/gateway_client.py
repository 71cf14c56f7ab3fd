# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/status/gateway_client.py

Cliente HTTP de consulta de estado en vivo contra la pasarela.

Solo se usa cuando la orden existe pero aún no tiene PaymentRecord.
El timeout es obligatorio y acotado; vencerlo se reporta como
GatewayStatusTimeout y el llamador responde `unknown`.

El cliente httpx se reutiliza (keep-alive); cerrar con aclose() en el
shutdown del lifespan.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

import httpx

from schoolpay.modules.payments.facades.webhooks.normalize import resolve_amount

logger = logging.getLogger(__name__)


class GatewayStatusError(RuntimeError):
    """La pasarela no devolvió un estado utilizable."""
    pass


class GatewayStatusTimeout(GatewayStatusError):
    """La consulta en vivo excedió su timeout."""
    pass


@dataclass(frozen=True)
class GatewayStatusSnapshot:
    raw_status: Optional[str]
    amount: Optional[Decimal] = None
    transaction_amount: Optional[Decimal] = None
    payment_mode: Optional[str] = None
    bank_reference: Optional[str] = None
    message: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


def _pick(*sources: Mapping[str, Any], keys: tuple) -> Optional[Any]:
    for source in sources:
        for key in keys:
            value = source.get(key)
            if value not in (None, ""):
                return value
    return None


def parse_gateway_status(body: Any) -> GatewayStatusSnapshot:
    """
    Extrae el estado de la respuesta de la pasarela.

    Acepta el estado en la raíz o bajo `data` / `details`.
    """
    if not isinstance(body, Mapping):
        raise GatewayStatusError(f"Unexpected gateway status body: {type(body).__name__}")

    nested = [body[k] for k in ("data", "details") if isinstance(body.get(k), Mapping)]
    sources = (body, *nested)

    status = _pick(*sources, keys=("status", "payment_status", "order_status"))
    mode = _pick(*sources, keys=("payment_mode", "payment_method"))
    reference = _pick(*sources, keys=("bank_reference", "transaction_id", "cf_payment_id"))
    message = _pick(*sources, keys=("payment_message", "message"))

    return GatewayStatusSnapshot(
        raw_status=str(status) if status is not None else None,
        amount=resolve_amount(_pick(*sources, keys=("order_amount",)), _pick(*sources, keys=("amount",))),
        transaction_amount=resolve_amount(
            _pick(*sources, keys=("transaction_amount",)),
            _pick(*sources, keys=("amount",)),
        ),
        payment_mode=str(mode) if mode is not None else None,
        bank_reference=str(reference) if reference is not None else None,
        message=str(message) if message is not None else None,
        raw=dict(body),
    )


class GatewayStatusClient:
    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def fetch_status(self, reference: str) -> GatewayStatusSnapshot:
        """
        GET {base_url}/{reference}

        Raises:
            GatewayStatusTimeout: timeout de conexión/lectura
            GatewayStatusError: error HTTP, status no-2xx o body no-JSON
        """
        url = f"{self.base_url}/{reference}"
        try:
            response = await self._get_client().get(url)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            logger.warning(f"Consulta de estado en vivo excedió {self.timeout_seconds}s ref={reference}")
            raise GatewayStatusTimeout(f"Gateway status call timed out after {self.timeout_seconds}s") from e
        except httpx.HTTPStatusError as e:
            raise GatewayStatusError(f"Gateway status call returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise GatewayStatusError(f"Gateway status call failed: {e}") from e
        except ValueError as e:
            raise GatewayStatusError("Gateway status response is not valid JSON") from e

        return parse_gateway_status(body)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = [
    "GatewayStatusClient",
    "GatewayStatusSnapshot",
    "GatewayStatusError",
    "GatewayStatusTimeout",
    "parse_gateway_status",
]

# Fin del archivo backend/schoolpay/modules/payments/facades/status/gateway_client.py
