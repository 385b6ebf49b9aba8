import html
import re
import typing

from ..models import REL_ALTERNATE, Link

TAG = re.compile(r"<[^>]*>")


def strip_markup(value: typing.Optional[str]) -> typing.Optional[str]:
    """
    Decodes HTML entities and removes tags.

    >>> strip_markup("<p>Free returns &amp; exchanges</p>")
    'Free returns & exchanges'
    """
    if value is None:
        return None
    return TAG.sub("", html.unescape(value)).strip()


def decode_entities(value: typing.Optional[str]) -> typing.Optional[str]:
    return html.unescape(value) if value is not None else None


def as_list(value: typing.Any) -> typing.List[typing.Any]:
    """
    Normalizes a multi-valued attribute, stored either as a sequence or as a
    comma-separated string, to a list.
    """
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def media_url(base_url: str, path: typing.Optional[str]) -> typing.Optional[str]:
    if not path:
        return None
    return base_url.rstrip("/") + "/" + path.lstrip("/")


def storefront_links(
    links: typing.Sequence[Link], web_base_url: str, url_key: typing.Optional[str]
) -> typing.List[Link]:
    """
    Points the ``alternate`` link at the storefront page of the entity, or drops it
    when the entity has no URL key.
    """
    retval: typing.List[Link] = []
    for link in links:
        if link.rel == REL_ALTERNATE:
            if not url_key:
                continue
            link = Link(REL_ALTERNATE, href=f"{web_base_url.rstrip('/')}/{url_key}.html")
        retval.append(link)
    return retval
