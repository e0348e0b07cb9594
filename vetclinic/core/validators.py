# vetclinic/core/validators.py
import re

_NON_DIGITS = re.compile(r"\D")


def digits_only(value: str) -> str:
    """'123.456.789-09' -> '12345678909'"""
    return _NON_DIGITS.sub("", value or "")


def normalize_cpf(value: str) -> str:
    """
    Strip punctuation from a CPF and check its length.

    Only the 11-digit shape is enforced, not the check digits.

    Raises:
        ValueError: if the result is not exactly 11 digits.
    """
    cpf = digits_only(value)
    if len(cpf) != 11:
        raise ValueError("CPF must contain 11 digits")
    return cpf


def initial_password_for(cpf: str) -> str:
    """Initial credential for provisioned accounts: the CPF digits."""
    return normalize_cpf(cpf)


def normalize_crmv(value: str) -> str:
    """
    CRMV (veterinary council register), e.g. '12345/SP'.

    At least 5 digits are required; letters are upper-cased.
    """
    v = value.strip().upper()
    if len(digits_only(v)) < 5:
        raise ValueError("CRMV must contain at least 5 digits")
    return v
