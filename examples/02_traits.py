"""
Example 02: Traits

This example demonstrates traits, inline extensions and method delegation.
"""

from dataclasses import dataclass

from flat_mapper import Node, blueprint


@dataclass
class Article:
    title: str
    body: str = ""
    notes: str = ""


class ArticleMapper(Node):
    blueprint = (
        blueprint(Article)
        .map("title")
        .trait(
            "editable",
            lambda t: t.map("body").trait("reviewed", lambda r: r.map("notes", reader="annotated")),
        )
        .build()
    )

    def annotated(self, mapping):
        return f"[review] {mapping.target.notes}"


def main():
    article = Article(title="Hello", body="World", notes="looks good")

    print("=== Traits ===\n")

    # No traits: only the base fields
    print(f"No traits: {ArticleMapper(article).read()}")

    # A nested trait activates the traits enclosing it
    node = ArticleMapper(article, "reviewed")
    print(f"'reviewed': {node.read()}")
    print(f"Active trait 'editable': {node.trait('editable')}\n")

    # Inline extension applied to one instance only
    node = ArticleMapper(article, extension=lambda t: t.map(headline="title", writer=False))
    print(f"With extension: {node.read()}")


if __name__ == "__main__":
    main()
