import logging
from dataclasses import dataclass
from datetime import datetime, timezone
import requests

from app.core.config import settings

logger = logging.getLogger(__name__)

ROMANIA_COUNTRY_CODE = 642


@dataclass
class NetopiaConfig:
    base_url: str           # sandbox or production API root
    auth_token: str         # Authorization header value (API key from the Netopia admin)
    pos_signature: str      # point-of-sale signature
    timeout: int = 25


class NetopiaError(RuntimeError):
    pass


# Netopia payment.status -> (intent status, message)
PAYMENT_STATUS_MAP = {
    1: ("pending", "Payment pending"),
    2: ("processing", "Payment processing"),
    3: ("awaiting confirmation", "Payment confirmed, awaiting capacity confirmation"),
    4: ("cancelled", "Payment cancelled by user"),
    5: ("declined", "Payment declined by bank"),
    7: ("expired", "Payment expired"),
    8: ("error", "Payment processing error"),
    9: ("error", "Payment processing error"),
    10: ("error", "Payment processing error"),
    12: ("declined", "Expired card"),
    16: ("declined", "Payment declined. Card presents a risk"),
    17: ("declined", "Invalid card number"),
    18: ("declined", "Closed card"),
    19: ("declined", "Expired card"),
    20: ("declined", "Insufficient funds"),
    21: ("declined", "Invalid CVV code"),
    22: ("declined", "Issuing bank error"),
    23: ("expired", "Payment session expired"),
    26: ("declined", "Card limit exceeded"),
    34: ("declined", "Transaction not allowed for this card"),
    35: ("declined", "Transaction declined by bank"),
    36: ("declined", "Transaction declined by anti-fraud system"),
    39: ("declined", "3DSecure authentication failed"),
    99: ("error", "General payment processing error"),
}

PAID_STATUS = 3
PAID_CODE = "00"


def map_payment_status(status, code=None, message=None) -> tuple[str, str]:
    """Internal status and message for a Netopia notification. Unknown values map to error."""
    try:
        status = int(status)
    except (TypeError, ValueError):
        return "error", f"Unknown payment status: {status}"
    mapped, text = PAYMENT_STATUS_MAP.get(status, ("error", f"Unknown payment status: {status}"))
    if status == PAID_STATUS and str(code or "") != PAID_CODE:
        mapped, text = "declined", f"Invalid payment code for successful payment: {code}"
    if message:
        text = f"{text} - {message}"
    return mapped, text


def transaction_details(payment: dict) -> dict:
    payment = payment or {}
    return {
        "ntpID": payment.get("ntpID") or "",
        "status": payment.get("status"),
        "code": payment.get("code") or "",
        "message": payment.get("message") or "",
        "amount": payment.get("amount"),
        "currency": payment.get("currency") or "RON",
        "dateTime": datetime.now(timezone.utc).isoformat(),
        "cardMasked": (payment.get("instrument") or {}).get("panMasked") or "",
        "authCode": (payment.get("data") or {}).get("AuthCode") or "",
        "rrn": (payment.get("data") or {}).get("RRN") or "",
    }


class NetopiaClient:
    def __init__(self, cfg: NetopiaConfig):
        self.cfg = cfg

    def request(self, method: str, path: str, payload: dict | None = None) -> dict:
        url = f"{self.cfg.base_url.rstrip('/')}{path}"
        headers = {"Content-Type": "application/json", "Authorization": self.cfg.auth_token}
        try:
            r = requests.request(method=method.upper(), url=url, json=payload or {}, headers=headers, timeout=self.cfg.timeout)
        except requests.RequestException as e:
            raise NetopiaError(f"Netopia request failed: {e}") from e
        try:
            data = r.json() if r.text else {}
        except ValueError:
            raise NetopiaError(f"Netopia invalid response ({r.status_code}): {r.text[:500]}")
        if r.status_code >= 400:
            detail = (data.get("error") or {}).get("message") if isinstance(data, dict) else None
            raise NetopiaError(f"Netopia API Error {r.status_code}: {detail or data}")
        if not isinstance(data, dict):
            raise NetopiaError(f"Netopia unexpected response ({r.status_code}): {str(data)[:500]}")
        return data

    def start_card_payment(
        self,
        *,
        order_id: str,
        amount: int,
        description: str,
        billing: dict,
        notify_url: str,
        redirect_url: str,
        currency: str = "RON",
    ) -> dict:
        payload = {
            "config": {
                "emailTemplate": "confirm",
                "notifyUrl": notify_url,
                "redirectUrl": redirect_url,
                "language": "ro",
            },
            "payment": {"options": {"installments": 1, "bonus": 0}},
            "order": {
                "posSignature": self.cfg.pos_signature,
                "dateTime": datetime.now(timezone.utc).isoformat(),
                "description": description,
                "orderID": order_id,
                "amount": amount,
                "currency": currency,
                "billing": {"country": ROMANIA_COUNTRY_CODE, "countryName": "Romania", **billing},
            },
        }
        logger.info("Netopia card/start for %s (%s %s)", order_id, amount, currency)
        data = self.request("POST", "/payment/card/start", payload)
        if not (data.get("payment") or {}).get("paymentURL"):
            raise NetopiaError(f"No paymentURL in Netopia response for {order_id}")
        return data


def netopia_client() -> NetopiaClient:
    if not (settings.NETOPIA_AUTH_TOKEN and settings.NETOPIA_POS_SIGNATURE):
        raise NetopiaError("Netopia is not configured (missing NETOPIA_AUTH_TOKEN / NETOPIA_POS_SIGNATURE)")
    return NetopiaClient(NetopiaConfig(
        base_url=settings.NETOPIA_SANDBOX_URL if settings.NETOPIA_USE_SANDBOX else settings.NETOPIA_PRODUCTION_URL,
        auth_token=settings.NETOPIA_AUTH_TOKEN,
        pos_signature=settings.NETOPIA_POS_SIGNATURE,
        timeout=settings.NETOPIA_TIMEOUT,
    ))
