"""Layouts -- render_yield, components and defer.

``Layout`` renders the page content with ``render_yield()``. The content
decides the page title and stylesheets, so the ``<head>`` part that needs
them is deferred: a ``with defer():`` block runs after the rest of the
template but its markup lands where the block appears.

Run:
    python app.py
"""

from dataclasses import dataclass, field

from tagcraft import html


@dataclass
class Page:
    title: str = "Untitled"
    stylesheets: list[str] = field(default_factory=list)


@html
def Layout(page):
    with html5(lang="en"):
        with head():
            meta(charset="utf-8")
            with defer():
                title_(page.title)
                for href in page.stylesheets:
                    link(rel="stylesheet", href=href)
        with body():
            with main():
                render_yield(page)


@html
def Card(heading):
    with section(class_="card"):
        h2(heading)
        render_children()


@html
def article(page, heading, paragraphs):
    page.title = heading
    page.stylesheets.append("/static/article.css")
    with Card(heading):
        for text in paragraphs:
            p(text)


release_notes = article.apply(
    heading="Release notes",
    paragraphs=["Templates compile to plain Python.", "Markup is escaped by default."],
)

output = Layout.render(Page(), block=release_notes)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
