"""Sitemap -- XML mode.

In XML mode empty elements self-close, ``__`` in a name becomes a namespace
colon, and there is no void-element or doctype handling. ``_for=`` with an
``as`` target repeats an element once per item.

Run:
    python app.py
"""

from dataclasses import dataclass
from datetime import date

from tagcraft import xml

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


@dataclass(frozen=True)
class Entry:
    loc: str
    updated: date
    priority: float | None = None


@xml
def sitemap(entries):
    raw('<?xml version="1.0" encoding="UTF-8"?>')
    with urlset(xmlns=SITEMAP_NS):
        with url(_for=entries) as entry:
            loc(entry.loc)
            lastmod(entry.updated.isoformat())
            if entry.priority is not None:
                priority(entry.priority)


entries = [
    Entry("https://example.com/", date(2024, 5, 1), 1.0),
    Entry("https://example.com/search?q=a&page=2", date(2024, 4, 2)),
]

output = sitemap.render(entries)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
