"""Tests for site-specific price handlers and their registry."""

import pytest

from tim_app.data.models import ExtractionStrategyName
from tim_app.errors import SiteHandlerError
from tim_app.extraction.site_handlers import (
    AmazonPriceHandler,
    CdiscountPriceHandler,
    EbayPriceHandler,
    GearbestPriceHandler,
    SiteHandlerRegistry,
    SiteHandlerStrategy,
    SiteMatch,
    default_registry,
)

AMAZON_OFFSCREEN = (
    '<span class="a-price"><span class="a-offscreen">$19.99</span>'
    '<span aria-hidden="true"><span class="a-price-symbol">$</span>'
    '<span class="a-price-whole">19<span class="a-price-decimal">.</span></span>'
    '<span class="a-price-fraction">99</span></span></span>'
)

AMAZON_SPLIT = (
    '<span class="a-price"><span class="a-price-symbol">$</span>'
    '<span class="a-price-whole">1,234<span class="a-price-decimal">.</span></span>'
    '<span class="a-price-fraction">56</span></span>'
)


class _FixedHandler:
    """Handler without domains that always returns the same match."""

    name = "fixed"
    domains = ()

    def __init__(self, match):
        self.match = match

    def is_target_node(self, node):
        return True

    def extract(self, node):
        return self.match


class _BrokenHandler:
    name = "broken"
    domains = ()

    def is_target_node(self, node):
        return True

    def extract(self, node):
        raise RuntimeError("markup changed")


class TestBuiltinHandlers:
    """Test suite for the built-in handlers."""

    def test_amazon_offscreen(self, make_soup):
        """Test that Amazon's screen-reader price is preferred."""
        soup = make_soup(AMAZON_OFFSCREEN)
        match = AmazonPriceHandler().extract(soup.span)
        assert match == SiteMatch(raw_text="$19.99")

    def test_amazon_split(self, make_soup):
        """Test Amazon's symbol / whole / fraction layout."""
        soup = make_soup(AMAZON_SPLIT)
        match = AmazonPriceHandler().extract(soup.span)

        assert match.raw_text == "$1,234.56"
        assert match.value == pytest.approx(1234.56)
        assert match.unit == "$"

    def test_ebay_us_prefix(self, make_soup):
        """Test that eBay's "US $" prefix reads as dollars."""
        soup = make_soup('<span class="s-item__price">US $12.99</span>')
        handler = EbayPriceHandler()

        assert handler.is_target_node(soup.span)
        assert handler.extract(soup.span).raw_text == "$12.99"

    def test_cdiscount_split_euro(self, make_soup):
        """Test Cdiscount's "449€ 00" layout."""
        soup = make_soup('<div class="fpPrice">449€ 00</div>')
        match = CdiscountPriceHandler().extract(soup.div)

        assert match.value == 449.0
        assert match.unit == "€"

    def test_cdiscount_ignores_other_currencies(self, make_soup):
        """Test that a dollar price class is left to other strategies."""
        soup = make_soup('<span class="price">$5.00</span>')
        assert CdiscountPriceHandler().extract(soup.span) is None

    def test_woocommerce_bdi(self, make_soup):
        """Test WooCommerce nested currency symbol markup."""
        soup = make_soup(
            '<span class="woocommerce-Price-amount amount"><bdi>'
            '<span class="woocommerce-Price-currencySymbol">$</span>25.00</bdi></span>'
        )
        match = GearbestPriceHandler().extract(soup.find("span"))

        assert match.raw_text == "$25.00"
        assert match.unit == "$"


class TestSiteHandlerRegistry:
    """Test suite for SiteHandlerRegistry."""

    def test_default_registry_order(self):
        """Test that built-in handlers are registered in priority order."""
        names = [handler.name for handler in default_registry()]
        assert names == ["amazon", "ebay", "cdiscount", "gearbest"]

    def test_invalid_handler_rejected(self):
        """Test that objects without the handler interface are refused."""
        registry = SiteHandlerRegistry()
        with pytest.raises(SiteHandlerError):
            registry.register(object())

    def test_for_domain(self):
        """Test narrowing to one storefront."""
        assert [h.name for h in default_registry("www.amazon.de")] == ["amazon"]
        assert [h.name for h in default_registry("m.ebay.co.uk")] == ["ebay"]
        assert len(default_registry("shop.example.com")) == 0

    def test_domainless_handler_serves_every_site(self):
        """Test that a handler without domains survives narrowing."""
        registry = SiteHandlerRegistry([_FixedHandler(None)])
        assert len(registry.for_domain("example.com")) == 1

    def test_clear(self):
        """Test that clear() empties the registry."""
        registry = default_registry()
        registry.clear()
        assert len(registry) == 0


class TestSiteHandlerStrategy:
    """Test suite for SiteHandlerStrategy."""

    def _strategy(self, config, cache, *handlers):
        return SiteHandlerStrategy(config, cache, SiteHandlerRegistry(handlers))

    def test_token_from_known_value(self, usd_config, pattern_cache, make_soup):
        """Test that a handler-supplied value is used as is."""
        soup = make_soup(AMAZON_SPLIT)
        token = self._strategy(usd_config, pattern_cache, AmazonPriceHandler()).extract(soup.span)

        assert token.numeric_value == pytest.approx(1234.56)
        assert token.currency_unit == "USD"
        assert token.strategy_used == ExtractionStrategyName.SITE_SPECIFIC
        assert token.source_node is soup.span

    def test_token_from_raw_text(self, usd_config, pattern_cache, make_soup):
        """Test that raw text is parsed with the configured pattern."""
        soup = make_soup(AMAZON_OFFSCREEN)
        token = self._strategy(usd_config, pattern_cache, AmazonPriceHandler()).extract(soup.span)

        assert token.raw_text == "$19.99"
        assert token.numeric_value == pytest.approx(19.99)

    def test_foreign_currency_resolved(self, usd_config, pattern_cache, make_soup):
        """Test that a euro match under a dollar format keeps the euro currency."""
        soup = make_soup('<div class="fpPrice">449€ 00</div>')
        token = self._strategy(usd_config, pattern_cache, CdiscountPriceHandler()).extract(soup.div)

        assert token.currency_unit == "EUR"
        assert token.numeric_value == 449.0

    def test_unit_and_amount_fallback(self, usd_config, pattern_cache, make_soup):
        """Test a raw euro text the dollar pattern cannot read."""
        soup = make_soup("<div>x</div>")
        handler = _FixedHandler(SiteMatch(raw_text="1.299,95 €", unit="€"))
        token = self._strategy(usd_config, pattern_cache, handler).extract(soup.div)

        assert token.currency_unit == "EUR"
        assert token.numeric_value == pytest.approx(1299.95)

    def test_failing_handler_is_skipped(self, usd_config, pattern_cache, make_soup):
        """Test that a raising handler does not stop the next one."""
        soup = make_soup("<div>x</div>")
        strategy = self._strategy(
            usd_config,
            pattern_cache,
            _BrokenHandler(),
            _FixedHandler(SiteMatch(raw_text="$3.50")),
        )
        assert strategy.extract(soup.div).numeric_value == 3.5

    def test_text_nodes_not_targeted(self, usd_config, pattern_cache, make_soup):
        """Test that site handlers only look at elements."""
        soup = make_soup("<p>$5</p>")
        strategy = self._strategy(usd_config, pattern_cache, _FixedHandler(SiteMatch(raw_text="$5")))
        assert strategy.applies_to(soup.p.string) is False
