"""Tests for compiled price pattern caching."""

import pytest

from tim_app.data.models import CurrencyFormatConfig, DirectionMode
from tim_app.errors import PatternBuildError
from tim_app.patterns.cache import (
    PatternCache,
    build_decimal_token,
    build_thousands_token,
    compile_pattern,
    get_default_cache,
    reset_default_cache,
)


class TestPatternCache:
    """Test suite for PatternCache."""

    def test_equal_configs_share_one_pattern(self, pattern_cache, usd_config):
        """Test that equal configurations return the identical compiled object."""
        first = pattern_cache.build_pattern(usd_config)
        second = pattern_cache.build_pattern(CurrencyFormatConfig(
            symbol="$", iso_code="USD", thousands="commas", decimal="dot"
        ))

        assert first is second
        assert len(pattern_cache) == 1
        assert pattern_cache.misses == 1
        assert pattern_cache.hits == 1

    def test_direction_is_part_of_key(self, pattern_cache, usd_config):
        """Test that forward and reverse patterns are cached separately."""
        forward = pattern_cache.build_pattern(usd_config)
        reverse = pattern_cache.build_pattern(usd_config.with_direction(DirectionMode.REVERSE))

        assert forward is not reverse
        assert len(pattern_cache) == 2

    def test_get_does_not_build(self, pattern_cache, usd_config):
        """Test that get() never compiles."""
        assert pattern_cache.get(usd_config) is None
        assert usd_config not in pattern_cache

        pattern_cache.build_pattern(usd_config)
        assert pattern_cache.get(usd_config) is not None
        assert usd_config in pattern_cache

    def test_clear(self, pattern_cache, usd_config):
        """Test that clear() evicts everything."""
        pattern_cache.build_pattern(usd_config)
        pattern_cache.clear()
        assert len(pattern_cache) == 0

    def test_failed_build_is_not_cached(self, pattern_cache):
        """Test that a configuration that cannot compile leaves no entry."""
        bad = CurrencyFormatConfig(thousands="commas", decimal="comma")
        with pytest.raises(PatternBuildError):
            pattern_cache.build_pattern(bad)
        assert len(pattern_cache) == 0

    def test_stats(self, pattern_cache, usd_config):
        """Test cache metrics."""
        pattern_cache.build_pattern(usd_config)
        pattern_cache.build_pattern(usd_config)
        stats = pattern_cache.get_stats()

        assert stats["size"] == 1
        assert stats["hit_rate"] == 0.5

    def test_default_cache_reset(self):
        """Test that resetting the default cache replaces it."""
        before = get_default_cache()
        reset_default_cache()
        assert get_default_cache() is not before


class TestCompilePattern:
    """Test suite for pattern compilation."""

    @pytest.mark.parametrize("thousands,decimal", [("commas", "comma"), ("spacesAndDots", "dot")])
    def test_overlapping_delimiters_rejected(self, thousands, decimal):
        """Test that delimiters which read both ways are refused."""
        with pytest.raises(PatternBuildError) as exc_info:
            compile_pattern(CurrencyFormatConfig(thousands=thousands, decimal=decimal))
        assert exc_info.value.recoverable is False

    def test_unknown_delimiter_rejected(self):
        """Test that an unrecognized delimiter name is refused."""
        with pytest.raises(PatternBuildError) as exc_info:
            build_thousands_token("spaces")
        assert exc_info.value.field == "thousands"

        with pytest.raises(PatternBuildError):
            build_decimal_token("period")

    def test_unit_required(self):
        """Test that a format with neither symbol nor code is refused."""
        with pytest.raises(PatternBuildError):
            compile_pattern(CurrencyFormatConfig(symbol="", iso_code=""))

    def test_usd_forms(self, usd_config):
        """Test symbol-first, amount-first and ISO code forms for dollars."""
        regex = compile_pattern(usd_config).regex

        assert regex.fullmatch("$1,234.56")
        assert regex.fullmatch("$ 12")
        assert regex.fullmatch("12.99$")
        assert regex.fullmatch("USD 45.00")
        assert regex.fullmatch("1,299 USD")

    def test_euro_is_amount_first(self, eur_config):
        """Test that euro prices are matched amount first only."""
        regex = compile_pattern(eur_config).regex

        assert regex.fullmatch("1.234,56 €")
        assert regex.fullmatch("1 234,56€")
        assert regex.fullmatch("EUR 12,50")
        assert regex.search("€12") is None

    def test_unit_followed_by_digits_is_not_a_suffix(self, eur_config):
        """Test that "12 €34" does not read the euro sign as a suffix of 12."""
        regex = compile_pattern(eur_config).regex
        assert regex.search("12 €34") is None

    def test_reverse_captures_price(self, usd_config):
        """Test that the reverse pattern captures the price before an annotation."""
        regex = compile_pattern(usd_config.with_direction(DirectionMode.REVERSE)).regex

        match = regex.search("Now $10.00 (1h 0m) only")
        assert match is not None
        assert match.group("price") == "$10.00"
        assert regex.search("Now $10.00 only") is None
