"""Hello World -- the simplest tagcraft example.

A template is a plain function decorated with ``html``. Calls of lowercase
names in statement position become elements; ``with`` nests them.

Run:
    python app.py
"""

from tagcraft import html


@html
def greeting(name):
    with div(class_="greeting"):
        h1(f"Hello, {name}!")
        p("Welcome to tagcraft.")


output = greeting.render("World")


def main() -> None:
    print(output)
    print()

    # Every value is escaped
    for name in ["Ada", "Grace", "<script>alert(1)</script>"]:
        print(greeting.render(name))
    print()

    # The generated Python, one append per run of markup
    print(greeting.compiled_code)


if __name__ == "__main__":
    main()
