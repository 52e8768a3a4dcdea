"""Tracebacks -- errors point at template lines.

An exception raised while a template runs keeps its type. Its traceback is
rewritten so that template frames show the file and line of the template
source, not the generated code.

Run:
    python app.py
"""

import traceback

from tagcraft import html


@html
def PriceTag(product):
    span(f"{product['price'] / product['quantity']:.2f}")


@html
def catalog(products):
    with ul():
        for product in products:
            with li():
                PriceTag(product)


def render_broken() -> str:
    """Render a catalog with a zero quantity and return the formatted traceback."""
    try:
        catalog.render([{"price": 3, "quantity": 0}])
    except ZeroDivisionError:
        return traceback.format_exc()
    return ""


def main() -> None:
    print(catalog.render([{"price": 3, "quantity": 2}]))
    print()
    print(render_broken())


if __name__ == "__main__":
    main()
