#!/usr/bin/env python3
"""
Scanner Demo - debounced scanning on an asyncio event loop

Simulates a page that keeps loading listing items (infinite scroll) while
the scanner observes it. Mutations arrive in bursts; the scanner waits
for a quiet period before running a pass over everything that changed.

Run: python examples/scanner_demo.py
"""

import asyncio

from bs4 import BeautifulSoup

from tim_app.config.loader import ConfigLoader
from tim_app.engine import IncrementalScanner
from tim_app.host.annotator import BadgeAnnotator
from tim_app.host.notifier import SoupNotifier
from tim_app.host.scheduler import AsyncioScheduler
from tim_app.logging import configure_from_settings
from tim_app.state.models import OverflowReport

PAGE = '<html><body><ul id="results"><li><span class="s-item__price">US $24.99</span></li></ul></body></html>'


def on_overflow(report: OverflowReport) -> None:
    print(f"  ⚠️  Queue full ({report.limit}), dropped {report.dropped} nodes")


async def load_more(soup: BeautifulSoup, notifier: SoupNotifier, results, page: int) -> None:
    """Append one page of results in a single mutation batch."""
    items = []
    for i in range(5):
        item = soup.new_tag("li")
        item.string = f"Result {page}.{i}: now ${page * 10 + i}.49"
        items.append(item)
    notifier.append(results, *items)


async def run_demo() -> None:
    soup = BeautifulSoup(PAGE, "html.parser")
    results = soup.find(id="results")
    notifier = SoupNotifier()

    config = ConfigLoader.create().merge_config({
        "wage": {"amount": 18.50},
        "scanner": {"debounce_interval_ms": 100, "max_pending_nodes": 12},
        "extraction": {"site_domain": "ebay.com"},
    })
    scanner = IncrementalScanner.from_config(
        config,
        BadgeAnnotator(notifier, soup, verbose=True),
        notifier=notifier,
        scheduler=AsyncioScheduler(),
        on_overflow=on_overflow,
    )
    scanner.start(results)

    print("\n📜 Scrolling: three bursts 50ms apart, then a pause")
    for page in range(1, 4):
        await load_more(soup, notifier, results, page)
        await asyncio.sleep(0.05)
    await asyncio.sleep(0.3)
    print(f"  Passes so far: {scanner.metrics.passes}")

    print("\n📜 Scrolling: one large burst")
    for page in range(4, 8):
        await load_more(soup, notifier, results, page)
    await asyncio.sleep(0.3)

    scanner.stop()

    print("\n🏷️  Annotated results:")
    for item in results.find_all("li")[:6]:
        print(f"  {item.get_text()}")

    print("\n📊 Scanner stats:")
    stats = scanner.get_stats()
    for key in ("batches", "passes", "nodes_admitted", "nodes_dropped", "annotations", "avg_pass_time_ms"):
        print(f"  {key}: {stats[key]}")
    print(f"  hits by strategy: {stats['extraction']['hits_by_strategy']}")


def main():
    """Run the asyncio scanner demo."""
    configure_from_settings(ConfigLoader.create().merge_config({"logging": {"level": "WARNING"}}))

    print("⏱️  Time Is Money - Scanner Demo")
    print("=" * 40)

    asyncio.run(run_demo())

    print("\n✅ Scanner demo completed")


if __name__ == "__main__":
    main()
