# sales/services/freight.py

"""
SUBSCRIPTION FREIGHT RULES

PF (pessoa física):
- subtotal >= 100.00            -> gratis                  0.00
- delivery in São Paulo         -> empresa (own delivery)  15.00
- anywhere else                 -> correios                25.00

PJ (pessoa jurídica):
- delivery in São Paulo         -> empresa                 0.00
- anywhere else                 -> transportadora_cliente  0.00 (customer's carrier)
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from decimal import Decimal

from users.accounts import ACCOUNT_BUSINESS

METHOD_FREE = "gratis"
METHOD_COMPANY = "empresa"
METHOD_CORREIOS = "correios"
METHOD_CUSTOMER_CARRIER = "transportadora_cliente"

FREE_SHIPPING_THRESHOLD = Decimal("100.00")
COMPANY_DELIVERY_PRICE = Decimal("15.00")
CORREIOS_PRICE = Decimal("25.00")

METHOD_LABELS = {
    METHOD_FREE: "Frete grátis",
    METHOD_COMPANY: "Entrega própria",
    METHOD_CORREIOS: "Correios",
    METHOD_CUSTOMER_CARRIER: "Transportadora do cliente",
}


@dataclass(frozen=True)
class FreightQuote:
    method: str
    price: Decimal

    @property
    def label(self) -> str:
        return METHOD_LABELS[self.method]


def _fold(value: str) -> str:
    text = unicodedata.normalize("NFKD", str(value or ""))
    return "".join(ch for ch in text if not unicodedata.combining(ch)).strip().lower()


def is_sao_paulo(state) -> bool:
    """
    Accepts the UF ("SP") or the state name, with or without accents.
    """
    folded = _fold(state)
    return folded in {"sp", "sao paulo"}


def quote_subscription_freight(*, account_type: str, state: str, subtotal) -> FreightQuote:
    in_sp = is_sao_paulo(state)

    if account_type == ACCOUNT_BUSINESS:
        if in_sp:
            return FreightQuote(METHOD_COMPANY, Decimal("0.00"))
        return FreightQuote(METHOD_CUSTOMER_CARRIER, Decimal("0.00"))

    if Decimal(str(subtotal)) >= FREE_SHIPPING_THRESHOLD:
        return FreightQuote(METHOD_FREE, Decimal("0.00"))
    if in_sp:
        return FreightQuote(METHOD_COMPANY, COMPANY_DELIVERY_PRICE)
    return FreightQuote(METHOD_CORREIOS, CORREIOS_PRICE)
