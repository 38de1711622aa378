import re


def generate_slug(title: str) -> str:
    """
    Build a URL slug from a document title.

    Lowercases, collapses every run of characters outside ``[a-z0-9]`` into a
    single hyphen and trims hyphens from both ends. Slugs are not unique.

        >>> generate_slug("Hello, World!")
        'hello-world'
    """
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower())
    return slug.strip("-")
