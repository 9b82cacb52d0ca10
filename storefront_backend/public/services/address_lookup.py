# public/services/address_lookup.py
"""
POSTAL CODE (CEP) LOOKUP

Pre-fills shipping forms from ViaCEP. Convenience only: the shopper can
always type the address by hand, and nothing downstream trusts it.

    GET {ADDRESS_LOOKUP["BASE_URL"]}/<8 digits>/json/
    {"logradouro", "bairro", "localidade", "uf", ...}  or  {"erro": true}
"""

from __future__ import annotations

import json
import logging
import string
from dataclasses import asdict, dataclass
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://viacep.com.br/ws"

STATE_NAMES = {
    "AC": "Acre",
    "AL": "Alagoas",
    "AP": "Amapá",
    "AM": "Amazonas",
    "BA": "Bahia",
    "CE": "Ceará",
    "DF": "Distrito Federal",
    "ES": "Espírito Santo",
    "GO": "Goiás",
    "MA": "Maranhão",
    "MT": "Mato Grosso",
    "MS": "Mato Grosso do Sul",
    "MG": "Minas Gerais",
    "PA": "Pará",
    "PB": "Paraíba",
    "PR": "Paraná",
    "PE": "Pernambuco",
    "PI": "Piauí",
    "RJ": "Rio de Janeiro",
    "RN": "Rio Grande do Norte",
    "RS": "Rio Grande do Sul",
    "RO": "Rondônia",
    "RR": "Roraima",
    "SC": "Santa Catarina",
    "SP": "São Paulo",
    "SE": "Sergipe",
    "TO": "Tocantins",
}


class AddressLookupError(Exception):
    """Lookup service failed (network, HTTP error, bad payload)"""


class InvalidPostalCode(AddressLookupError):
    pass


class PostalCodeNotFound(AddressLookupError):
    pass


@dataclass(frozen=True)
class Address:
    postal_code: str
    street: str
    neighborhood: str
    city: str
    state: str
    state_code: str

    def as_dict(self) -> dict:
        return asdict(self)


def clean_postal_code(value) -> str:
    digits = "".join(ch for ch in str(value or "") if ch in string.digits)
    if len(digits) != 8:
        raise InvalidPostalCode("CEP must have 8 digits")
    return digits


def _cfg() -> dict:
    cfg = getattr(settings, "ADDRESS_LOOKUP", {}) or {}
    return cfg if isinstance(cfg, dict) else {}


def lookup_postal_code(value) -> Address:
    cep = clean_postal_code(value)
    cfg = _cfg()
    base = str(cfg.get("BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
    timeout = int(cfg.get("TIMEOUT_SECONDS") or 8)

    req = Request(f"{base}/{cep}/json/", headers={"Accept": "application/json"}, method="GET")

    try:
        with urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        # ViaCEP answers 400 for malformed codes
        if e.code == 400:
            raise InvalidPostalCode("CEP must have 8 digits") from e
        logger.warning("Address lookup HTTP error", extra={"cep": cep, "status_code": e.code})
        raise AddressLookupError(f"Address lookup failed: HTTP {e.code}") from e
    except (URLError, TimeoutError) as e:
        logger.warning("Address lookup unreachable", extra={"cep": cep, "error": str(e)})
        raise AddressLookupError(f"Address lookup unreachable: {e}") from e

    try:
        data = json.loads(raw or "{}")
    except json.JSONDecodeError as e:
        raise AddressLookupError("Address lookup returned non-JSON") from e

    if not isinstance(data, dict):
        raise AddressLookupError("Address lookup returned an unexpected payload")

    if data.get("erro"):
        raise PostalCodeNotFound(f"CEP {cep} not found")

    uf = str(data.get("uf") or "").strip().upper()
    return Address(
        postal_code=cep,
        street=str(data.get("logradouro") or ""),
        neighborhood=str(data.get("bairro") or ""),
        city=str(data.get("localidade") or ""),
        state=STATE_NAMES.get(uf, uf),
        state_code=uf,
    )
