"""
Host environment adapters.

The scanner never talks to a document host directly. It receives a
mutation notifier, a timer scheduler and an annotation callback; this
package provides implementations of those interfaces for BeautifulSoup
trees and for asyncio or manually driven clocks.
"""
