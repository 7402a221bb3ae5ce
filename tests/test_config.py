"""Settings tests — production guards and derived switches."""

import pytest

from fornecedores.config import Settings


def test_https_redirect_off_in_development():
    assert Settings(environment="development").redirect_to_https is False


def test_https_redirect_on_outside_development():
    s = Settings(environment="production", jwt_secret="a-real-secret")
    assert s.redirect_to_https is True


def test_https_redirect_explicit_override():
    s = Settings(environment="production", jwt_secret="a-real-secret", https_redirect=False)
    assert s.redirect_to_https is False


def test_default_secret_rejected_outside_development():
    with pytest.raises(ValueError):
        Settings(environment="production")
