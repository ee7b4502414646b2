import elementpath
from elementpath.xpath3 import XPath3Parser
from lxml import etree, html


def html_element_repr(self):
    return f"HtmlElement(tag={self.tag}, base_url={getattr(self, 'base_url', None)!r})"

# Patch lxml.html.HtmlElement.__repr__ to improve debugging with base_url.
html.HtmlElement.__repr__ = html_element_repr


class XPath3Element(etree.ElementBase):
    def xpath3(self, expr, **kwargs):
        """
        Evaluate an XPath 3 expression using elementpath library,
        returning the results as a list.
        """
        kwargs.setdefault("parser", XPath3Parser)
        kwargs.setdefault("uri", getattr(self.getroottree().docinfo, "URL", None))
        return elementpath.select(self, expr, **kwargs)

    @property
    def base_url(self):
        return self.getroottree().docinfo.URL


html.HtmlElement.xpath3 = XPath3Element.xpath3


def html_parser(encoding: str | None = None) -> html.HTMLParser:
    """
    HTML parser producing ``lxml.html.HtmlElement`` nodes with ``xpath3``.

    With `encoding` set, the parser ignores ``<meta charset>`` declarations
    and reads the bytes in that encoding. A fresh parser per call.
    """
    return html.HTMLParser(encoding=encoding)


def xml_parser(encoding: str | None = None) -> etree.XMLParser:
    """
    XML parser producing `XPath3Element` nodes. A fresh parser per call.

    Entities are not resolved and no network access is allowed.
    """
    parser = etree.XMLParser(
        encoding=encoding,
        resolve_entities=False,
        no_network=True,
    )
    parser.set_element_class_lookup(etree.ElementDefaultClassLookup(element=XPath3Element))
    return parser
