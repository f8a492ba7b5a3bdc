"""Tests for the price pre-filter, price search and locale tables."""

import pytest

from tim_app.data.models import CurrencyFormatConfig
from tim_app.data.normalizer import normalize_number, parse_amount
from tim_app.errors import MalformedNumericError
from tim_app.patterns.finder import PriceFinder, find_prices, might_contain_price, resolve_format
from tim_app.patterns.locales import currency_for_symbol, detect_format_from_text, get_locale_format


class TestMightContainPrice:
    """Test suite for the cheap pre-filter."""

    @pytest.mark.parametrize("text", [
        "Price is $10.00",
        "Only 19,99 €",
        "Costs 25 USD",
        "12 kr",
        "Total 12.50",
        "¥1200",
    ])
    def test_money_text(self, text):
        """Test texts that look like prices."""
        assert might_contain_price(text) is True

    @pytest.mark.parametrize("text", [
        "Year 2024",
        "Call 555-1234",
        "Version 1.2.3",
        "Date 12/05/2024",
        "Order 12345678901234",
        "No digits here $",
        "",
        None,
    ])
    def test_non_money_text(self, text):
        """Test texts that must not pass the gate."""
        assert might_contain_price(text) is False

    def test_configured_unit(self):
        """Test that the configured unit counts even when it is not a known currency."""
        config = CurrencyFormatConfig(symbol="Rs", iso_code="XYZ")
        assert might_contain_price("Pay 50 XYZ", config) is True
        assert might_contain_price("Pay 50 XYZ") is False


class TestFindPrices:
    """Test suite for find_prices and PriceFinder."""

    def test_pattern_matches_whole_price(self, usd_config, pattern_cache):
        """Test that the returned pattern matches a thousands-grouped price."""
        search = find_prices("$1,234.56", usd_config, pattern_cache)

        assert search.has_potential_price is True
        assert search.pattern.regex.fullmatch("$1,234.56")
        assert search.thousands_token == ","
        assert search.decimal_token == r"\."

    def test_uses_given_cache(self, usd_config, pattern_cache):
        """Test that the pattern is built through the supplied cache."""
        find_prices("$5", usd_config, pattern_cache)
        find_prices("$6", usd_config, pattern_cache)
        assert pattern_cache.misses == 1
        assert pattern_cache.hits == 1

    def test_gate_verdict(self, usd_config, pattern_cache):
        """Test that non-price text still yields a pattern but a negative verdict."""
        search = find_prices("Year 2024", usd_config, pattern_cache)
        assert search.has_potential_price is False
        assert search.pattern is not None

    def test_iter_matches(self, usd_config):
        """Test that every price in a text is yielded in order."""
        finder = PriceFinder(usd_config)
        matches = [m.group(0) for m in finder.iter_matches("$5 and $7.50")]
        assert matches == ["$5", "$7.50"]

    def test_iter_matches_skips_gated_text(self, usd_config):
        """Test that gated text yields nothing."""
        assert list(PriceFinder(usd_config).iter_matches("Year 2024")) == []

    def test_resolve_format_from_text(self):
        """Test that missing separators are filled from the text's locale."""
        config = CurrencyFormatConfig(symbol="€", iso_code="EUR", thousands="", decimal="")
        resolved = resolve_format("12,50 €", config)
        assert (resolved.thousands, resolved.decimal) == ("spacesAndDots", "comma")

    def test_resolve_format_keeps_explicit(self, usd_config):
        """Test that explicit separators are never overridden."""
        assert resolve_format("12,50 €", usd_config) is usd_config


class TestLocales:
    """Test suite for locale lookups."""

    def test_locale_by_symbol_then_code(self):
        """Test symbol lookup, code fallback and the US default."""
        assert get_locale_format("€").group == "EU"
        assert get_locale_format(None, "JPY").group == "JP"
        assert get_locale_format("?").group == "US"

    def test_detect_format(self):
        """Test locale detection from text."""
        assert detect_format_from_text("100 zł").group == "EU"
        assert detect_format_from_text("no currency") is None

    def test_currency_for_symbol(self):
        """Test ISO code resolution for symbols and codes."""
        assert currency_for_symbol("£", "USD") == "GBP"
        assert currency_for_symbol("EUR", "USD") == "EUR"
        assert currency_for_symbol("¤", "USD") == "USD"


class TestNormalizer:
    """Test suite for numeric normalization."""

    def test_us_number(self):
        """Test comma thousands with a dot decimal."""
        assert normalize_number("1,234.56", ",", r"\.") == pytest.approx(1234.56)

    def test_eu_number(self):
        """Test space and dot thousands with a comma decimal."""
        assert normalize_number("1 234,56", r"(?:\s|\.)", ",") == pytest.approx(1234.56)
        assert normalize_number("1.234,56", r"(?:\s|\.)", ",") == pytest.approx(1234.56)

    def test_malformed_number(self):
        """Test that unparseable text raises MalformedNumericError."""
        with pytest.raises(MalformedNumericError) as exc_info:
            normalize_number("1.2.3", ",", r"\.")
        assert exc_info.value.raw_text == "1.2.3"
        assert exc_info.value.recoverable is True

    def test_parse_amount(self, usd_config, pattern_cache):
        """Test amount extraction from a matched price."""
        pattern = pattern_cache.build_pattern(usd_config)
        assert parse_amount("$12.99", pattern) == pytest.approx(12.99)
        assert parse_amount("USD 1,000", pattern) == 1000.0

        with pytest.raises(MalformedNumericError):
            parse_amount("$", pattern)
