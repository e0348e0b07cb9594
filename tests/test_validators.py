import pytest

from vetclinic.core.validators import (
    digits_only,
    initial_password_for,
    normalize_cpf,
    normalize_crmv,
)


def test_digits_only_strips_punctuation():
    assert digits_only("529.982.247-25") == "52998224725"
    assert digits_only("") == ""


def test_normalize_cpf_accepts_masked_and_plain():
    assert normalize_cpf("529.982.247-25") == "52998224725"
    assert normalize_cpf(" 52998224725 ") == "52998224725"


@pytest.mark.parametrize("value", ["123", "529.982.247-2", "529982247250", "abc"])
def test_normalize_cpf_rejects_wrong_length(value):
    with pytest.raises(ValueError):
        normalize_cpf(value)


def test_initial_password_is_cpf_digits():
    assert initial_password_for("111.444.777-35") == "11144477735"


def test_normalize_crmv():
    assert normalize_crmv(" 12345/sp ") == "12345/SP"
    with pytest.raises(ValueError):
        normalize_crmv("1234/SP")
