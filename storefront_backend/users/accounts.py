"""
PATH: users/accounts.py

ACCOUNT TYPES (PF / PJ)

A customer buys either as a person (PF, "pessoa física") or as a company
(PJ, "pessoa jurídica"). Each variant carries its own required documents:

- PersonalAccountInfo:  cpf (11 digits), optional birth date
- BusinessAccountInfo:  cnpj (14 digits), state registration, e-mail for NF-e XML

Only presence/format is validated (digit count); document check digits are not.
"""

from __future__ import annotations

import string
from dataclasses import asdict, dataclass
from datetime import date
from typing import ClassVar, Optional, Union

ACCOUNT_PERSONAL = "PF"
ACCOUNT_BUSINESS = "PJ"

ACCOUNT_TYPE_CHOICES = [
    (ACCOUNT_PERSONAL, "Pessoa Física"),
    (ACCOUNT_BUSINESS, "Pessoa Jurídica"),
]

PERSONAL_FIELDS = ("cpf", "birth_date")
BUSINESS_FIELDS = ("cnpj", "state_registration", "xml_email")


class AccountInfoError(ValueError):
    pass


def only_digits(value) -> str:
    return "".join(ch for ch in str(value or "") if ch in string.digits)


@dataclass(frozen=True)
class PersonalAccountInfo:
    cpf: str
    birth_date: Optional[date] = None

    account_type: ClassVar[str] = ACCOUNT_PERSONAL

    def __post_init__(self):
        if len(only_digits(self.cpf)) != 11:
            raise AccountInfoError("CPF must have 11 digits")
        object.__setattr__(self, "cpf", only_digits(self.cpf))


@dataclass(frozen=True)
class BusinessAccountInfo:
    cnpj: str
    state_registration: str = ""
    xml_email: str = ""

    account_type: ClassVar[str] = ACCOUNT_BUSINESS

    def __post_init__(self):
        if len(only_digits(self.cnpj)) != 14:
            raise AccountInfoError("CNPJ must have 14 digits")
        object.__setattr__(self, "cnpj", only_digits(self.cnpj))
        object.__setattr__(self, "state_registration", (self.state_registration or "").strip())
        object.__setattr__(self, "xml_email", (self.xml_email or "").strip().lower())


AccountInfo = Union[PersonalAccountInfo, BusinessAccountInfo]


def account_info_from_profile(profile) -> Optional[AccountInfo]:
    """
    Rebuild the variant stored on a profile row.
    Returns None while the customer has not filled in their documents yet.
    """
    if profile.account_type == ACCOUNT_BUSINESS:
        if not profile.cnpj:
            return None
        return BusinessAccountInfo(
            cnpj=profile.cnpj,
            state_registration=profile.state_registration,
            xml_email=profile.xml_email,
        )

    if not profile.cpf:
        return None
    return PersonalAccountInfo(cpf=profile.cpf, birth_date=profile.birth_date)


def apply_account_info(profile, info: AccountInfo) -> list[str]:
    """
    Write a variant onto a profile and blank out the other variant's fields,
    so a profile never carries both CPF and CNPJ data. Returns touched fields.
    """
    profile.account_type = info.account_type

    if isinstance(info, PersonalAccountInfo):
        profile.cpf = info.cpf
        profile.birth_date = info.birth_date
        profile.cnpj = ""
        profile.state_registration = ""
        profile.xml_email = ""
    else:
        profile.cnpj = info.cnpj
        profile.state_registration = info.state_registration
        profile.xml_email = info.xml_email
        profile.cpf = ""
        profile.birth_date = None

    return ["account_type", *PERSONAL_FIELDS, *BUSINESS_FIELDS]


def account_info_as_dict(info: Optional[AccountInfo]) -> Optional[dict]:
    if info is None:
        return None
    return {"account_type": info.account_type, **asdict(info)}
