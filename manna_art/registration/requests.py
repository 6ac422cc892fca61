"""
Registration and remix requests.

Requests arrive as multipart forms. Everything here is validated before any
collaborator is called, so a bad request never leaves side effects behind.

Normalization:
- text fields are trimmed of leading/trailing whitespace
- licenseFee is a non-negative USD decimal converted to integer micro-units
  (6 decimals) by truncation; absent means 0
- commercialRevShare is a percentage in [0, 100], truncated to an integer;
  absent means 0 for new registrations and 10 for remixes
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, Field

from ..catalog.schemas import IPType
from ..errors import ValidationError

MISSING_FIELDS = "Todos los campos son requeridos"

# Fee minor units per USD (6-decimal stablecoin convention)
FEE_UNITS_PER_USD = 1_000_000

# Upper bound on licenseFee in USD; keeps the micro-unit integer small
MAX_LICENSE_FEE = Decimal(1_000_000_000)

DEFAULT_REV_SHARE = 0
DEFAULT_REMIX_REV_SHARE = 10
MAX_REV_SHARE = 100

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _decimal(raw: str, field: str) -> Decimal:
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValidationError(f"{field} debe ser un número: {raw!r}")
    if not value.is_finite():
        raise ValidationError(f"{field} debe ser un número: {raw!r}")
    return value


def parse_license_fee(raw: Optional[str]) -> int:
    """
    Convert a USD amount to integer micro-units, truncating extra precision.

    Examples:
        None -> 0
        "1" -> 1000000
        "0.5" -> 500000
        "0.0000019" -> 1
    """
    raw = _clean(raw)
    if raw is None:
        return 0
    value = _decimal(raw, "licenseFee")
    if value < 0:
        raise ValidationError("licenseFee no puede ser negativo")
    if value > MAX_LICENSE_FEE:
        raise ValidationError(f"licenseFee no puede superar {MAX_LICENSE_FEE}")
    return int((value * FEE_UNITS_PER_USD).to_integral_value(rounding=ROUND_DOWN))


def parse_revenue_share(raw: Optional[str], default: int) -> int:
    """
    Convert a revenue-share percentage to an integer in [0, 100].

    Examples:
        None -> default
        "15" -> 15
        "12.9" -> 12
    """
    raw = _clean(raw)
    if raw is None:
        return default
    value = _decimal(raw, "commercialRevShare")
    if not 0 <= value <= MAX_REV_SHARE:
        raise ValidationError("commercialRevShare debe estar entre 0 y 100")
    return int(value.to_integral_value(rounding=ROUND_DOWN))


def parse_ip_type(raw: str) -> IPType:
    try:
        return IPType(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in IPType)
        raise ValidationError(f"ipType inválido: {raw}. Usa uno de: {allowed}")


class RegistrationRequest(BaseModel):
    """A validated request to register a new artwork."""

    email: Optional[str] = None
    title: str
    description: str
    ip_type: IPType
    wallet_address: str
    file: bytes = Field(repr=False)
    content_type: str = DEFAULT_CONTENT_TYPE
    filename: Optional[str] = None
    license_fee: int = Field(default=0, ge=0)
    commercial_rev_share: int = Field(default=DEFAULT_REV_SHARE, ge=0, le=MAX_REV_SHARE)

    @classmethod
    def from_form(
        cls,
        *,
        email: Optional[str],
        title: Optional[str],
        description: Optional[str],
        ip_type: Optional[str],
        wallet_address: Optional[str],
        file: Optional[bytes],
        content_type: Optional[str] = None,
        filename: Optional[str] = None,
        license_fee: Optional[str] = None,
        commercial_rev_share: Optional[str] = None,
    ) -> "RegistrationRequest":
        fields = [_clean(email), _clean(title), _clean(description), _clean(ip_type), _clean(wallet_address)]
        if not all(fields) or not file:
            raise ValidationError(MISSING_FIELDS)

        return cls(
            email=fields[0],
            title=fields[1],
            description=fields[2],
            ip_type=parse_ip_type(ip_type),
            wallet_address=fields[4],
            file=file,
            content_type=_clean(content_type) or DEFAULT_CONTENT_TYPE,
            filename=filename,
            license_fee=parse_license_fee(license_fee),
            commercial_rev_share=parse_revenue_share(commercial_rev_share, DEFAULT_REV_SHARE),
        )


class RemixRequest(RegistrationRequest):
    """A validated request to register a derivative of a catalog artwork.

    The email is optional: remixes do not go through the entitlement check.
    """

    parent_ip_id: str
    commercial_rev_share: int = Field(default=DEFAULT_REMIX_REV_SHARE, ge=0, le=MAX_REV_SHARE)

    @classmethod
    def from_form(
        cls,
        *,
        parent_ip_id: Optional[str],
        email: Optional[str],
        title: Optional[str],
        description: Optional[str],
        ip_type: Optional[str],
        wallet_address: Optional[str],
        file: Optional[bytes],
        content_type: Optional[str] = None,
        filename: Optional[str] = None,
        license_fee: Optional[str] = None,
        commercial_rev_share: Optional[str] = None,
    ) -> "RemixRequest":
        fields = [
            _clean(parent_ip_id),
            _clean(title),
            _clean(description),
            _clean(ip_type),
            _clean(wallet_address),
        ]
        if not all(fields) or not file:
            raise ValidationError(MISSING_FIELDS)

        return cls(
            parent_ip_id=fields[0],
            email=_clean(email),
            title=fields[1],
            description=fields[2],
            ip_type=parse_ip_type(ip_type),
            wallet_address=fields[4],
            file=file,
            content_type=_clean(content_type) or DEFAULT_CONTENT_TYPE,
            filename=filename,
            license_fee=parse_license_fee(license_fee),
            commercial_rev_share=parse_revenue_share(
                commercial_rev_share, DEFAULT_REMIX_REV_SHARE
            ),
        )
