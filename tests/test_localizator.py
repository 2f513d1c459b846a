"""
Tests for utils/localizator.py

Tests cover:
- Lang parameter functionality (request-scoped language)
- Fallback to config.SHOP_LANGUAGE
- Different language codes (vi, en)
- All three methods (get_text, get_currency_symbol, get_currency_text)
- Thread-safety (concurrent calls with different lang values)
"""

import json
import threading
import time
from unittest.mock import patch

import pytest

from enums.shop_entity import ShopEntity
from utils.localizator import Localizator


class TestLocalizatorLangParameter:
    """Test Localizator methods with optional lang parameter."""

    def test_get_text_with_lang_vi(self):
        result = Localizator.get_text(ShopEntity.USER, "login_success", lang="vi")
        assert result == "Đăng nhập thành công!"

    def test_get_text_with_lang_en(self):
        result = Localizator.get_text(ShopEntity.USER, "login_success", lang="en")
        assert result == "Logged in successfully!"

    def test_get_text_admin_entity(self):
        result = Localizator.get_text(ShopEntity.ADMIN, "cannot_act_on_self", lang="vi")
        assert result == "Bạn không thể thực hiện thao tác này trên tài khoản của chính mình."

        result = Localizator.get_text(ShopEntity.ADMIN, "cannot_act_on_self", lang="en")
        assert result == "You cannot perform this action on your own account."

    def test_get_currency_symbol_with_lang(self):
        with patch('utils.localizator.config') as mock_config:
            mock_config.CURRENCY = "VND"

            assert Localizator.get_currency_symbol(lang="vi") == "₫"
            assert Localizator.get_currency_symbol(lang="en") == "₫"

    def test_get_currency_text_with_lang(self):
        with patch('utils.localizator.config') as mock_config:
            mock_config.CURRENCY = "USD"

            assert Localizator.get_currency_text(lang="en") == "USD"


class TestLocalizatorFallback:
    """Test fallback to config when lang parameter is not provided."""

    def test_get_text_without_lang_falls_back_to_config(self):
        with patch('utils.localizator.config') as mock_config:
            mock_config.SHOP_LANGUAGE = "vi"
            assert Localizator.get_text(ShopEntity.USER, "email_not_registered") == "Email này chưa được đăng ký"

        with patch('utils.localizator.config') as mock_config:
            mock_config.SHOP_LANGUAGE = "en"
            assert Localizator.get_text(ShopEntity.USER, "email_not_registered") == "This e-mail is not registered."

    def test_get_currency_symbol_without_lang_falls_back_to_config(self):
        with patch('utils.localizator.config') as mock_config:
            mock_config.CURRENCY = "VND"
            mock_config.SHOP_LANGUAGE = "vi"

            assert Localizator.get_currency_symbol() == "₫"


class TestLocalizatorThreadSafety:
    """Test thread-safety and race condition prevention."""

    def test_concurrent_calls_with_different_langs(self):
        results = []
        errors = []

        def fetch(lang: str):
            try:
                for _ in range(10):
                    results.append((lang, Localizator.get_text(ShopEntity.USER, "cart_empty", lang=lang)))
                    time.sleep(0.001)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=fetch, args=(lang,)) for lang in ("vi", "en")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(errors) == 0, f"Errors occurred during concurrent execution: {errors}"
        expected = {"vi": "Giỏ hàng trống.", "en": "Your cart is empty."}
        for lang, result in results:
            assert result == expected[lang]

    def test_no_global_state_mutation(self):
        with patch('utils.localizator.config') as mock_config:
            mock_config.SHOP_LANGUAGE = "vi"

            assert Localizator.get_text(ShopEntity.USER, "cart_empty", lang="en") == "Your cart is empty."
            assert mock_config.SHOP_LANGUAGE == "vi"


class TestLocalizatorEdgeCases:
    """Test edge cases and error handling."""

    def test_get_text_with_invalid_lang_raises_error(self):
        with pytest.raises(FileNotFoundError):
            Localizator.get_text(ShopEntity.USER, "cart_empty", lang="invalid")

    def test_get_text_with_invalid_key_raises_error(self):
        with pytest.raises(KeyError):
            Localizator.get_text(ShopEntity.USER, "invalid_key_that_does_not_exist", lang="vi")

    def test_language_files_have_the_same_keys(self):
        files = {lang: json.loads((Localizator.localization_dir / f"{lang}.json").read_text(encoding="utf-8"))
                 for lang in ("vi", "en")}
        for section in ("admin", "user", "common"):
            assert set(files["vi"][section]) == set(files["en"][section]), section
