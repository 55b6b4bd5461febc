# hive_api/utils/br.py
import re

DOCUMENT_LENGTHS = {"CPF": 11, "CNPJ": 14}


def only_digits(s: str | None) -> str:
    return re.sub(r"\D+", "", s or "")


def normalize_document(document_type: str | None, value: str | None) -> str | None:
    """Devolve só os dígitos se o tamanho bate com o tipo (CPF 11, CNPJ 14)."""
    expected = DOCUMENT_LENGTHS.get((document_type or "").upper())
    digits = only_digits(value)
    if expected is None or len(digits) != expected:
        return None
    return digits


def normalize_phone(value: str | None) -> str | None:
    # guarda só dígitos; DDI/DDD opcionais
    digits = only_digits(value)
    return digits or None
