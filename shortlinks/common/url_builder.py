"""Short URL assembly."""


def build_short_url(code: str, base_url: str, path_prefix: str = "") -> str:
    """Join base URL, optional path prefix and code with single slashes.

    >>> build_short_url("aZ3k9Q", "https://sho.rt/", "/s/")
    'https://sho.rt/s/aZ3k9Q'
    """
    parts = [base_url.rstrip("/"), path_prefix.strip("/"), code]
    return "/".join(part for part in parts if part)
