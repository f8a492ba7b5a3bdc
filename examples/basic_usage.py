#!/usr/bin/env python3
"""
Basic Usage Example - Time Is Money Price Scanner

This script demonstrates the basic usage of the scanner on a static
BeautifulSoup document. It shows how to:
- Convert a single price into work time
- Search text for prices under a currency format
- Annotate a page and pick up content added afterwards
- Revert the annotations again

Run: python examples/basic_usage.py
"""

from bs4 import BeautifulSoup

import tim_app
from tim_app.data.models import CurrencyFormatConfig, WageConfig, WagePeriod
from tim_app.host.annotator import BadgeAnnotator, revert_annotations, strip_time_annotations
from tim_app.host.notifier import SoupNotifier
from tim_app.host.scheduler import ManualScheduler
from tim_app.logging import configure_logging
from tim_app.patterns.finder import PriceFinder

PRODUCT_PAGE = """
<html><body>
  <div id="shop">
    <h1>Espresso Machine</h1>
    <p class="lead">Was $349.00, now only $279.99!</p>
    <span class="price" data-price="279.99">$279.99</span>
    <p>Ships in 2024 to 50 countries.</p>
    <script>window.analytics = {"value": "$279.99"};</script>
  </div>
</body></html>
"""


def demo_conversion():
    """Convert single amounts."""
    print("\n💵 Converting prices")
    print("-" * 40)

    wage = WageConfig(amount=52000, period=WagePeriod.YEARLY)
    print(f"Yearly wage 52,000 → {wage.hourly_rate:.2f}/hour")

    for amount in (4.50, 59.99, 279.99, 1299.00):
        result = tim_app.convert(amount, wage.hourly_rate)
        print(f"  ${amount:>8,.2f} costs {result.hours}h {result.minutes}m of work")

    failure = tim_app.convert(10, 0)
    print(f"  Zero wage → {failure.reason.value}")


def demo_text_search():
    """Find prices in plain text."""
    print("\n🔍 Searching text")
    print("-" * 40)

    finder = PriceFinder(CurrencyFormatConfig())
    for text in ("Only $12.99 today", "Year 2024", "Total: USD 1,299.00"):
        matches = [m.group(0) for m in finder.iter_matches(text)]
        print(f"  {text!r:28} → {matches or 'no prices'}")


def demo_scanner():
    """Annotate a document and follow later additions."""
    print("\n🏷️  Annotating a page")
    print("-" * 40)

    soup = BeautifulSoup(PRODUCT_PAGE, "html.parser")
    notifier = SoupNotifier()
    scheduler = ManualScheduler()
    shop = soup.find(id="shop")

    handle = tim_app.start(
        shop,
        CurrencyFormatConfig(),
        BadgeAnnotator(notifier, soup),
        wage=WageConfig(amount=25),
        notifier=notifier,
        scheduler=scheduler,
    )

    # Nothing happens until the debounce interval elapses
    scheduler.run_all()
    print(f"  After initial scan: {shop.find('p', class_='lead').get_text()}")
    print(f"  Price badge:        {shop.find('span', class_='price').get_text()}")

    # Content added later is picked up by the next pass
    review = soup.new_tag("p")
    review.string = "Bundle with grinder for $99.00"
    notifier.append(shop, review)
    scheduler.run_all()
    print(f"  Added content:      {review.get_text()}")

    stats = handle.scanner.get_stats()
    print(f"  Passes: {stats['passes']}, annotations: {stats['annotations']}")

    tim_app.stop(handle)

    reverted = revert_annotations(shop)
    print(f"\n↩️  Reverted {reverted} annotations: {shop.find('p', class_='lead').get_text()}")

    copied = "Was $349.00 (13h 58m), now $279.99 (11h 12m)"
    print(f"  Copied text cleaned: {strip_time_annotations(copied, CurrencyFormatConfig())}")


def main():
    """Run the basic usage walkthrough."""
    configure_logging(level="WARNING")

    print("⏱️  Time Is Money - Basic Usage")
    print("=" * 40)

    demo_conversion()
    demo_text_search()
    demo_scanner()

    print("\n✅ Basic usage example completed")


if __name__ == "__main__":
    main()
