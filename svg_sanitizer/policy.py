"""Allowlist and denylist tables for SVG certificate templates."""

from __future__ import annotations

# Every name in these tables is lowercase. Callers fold tag and attribute
# names with ascii_lower() before looking them up.

# SVG elements that survive sanitization. foreignObject is not listed.
ALLOWED_TAGS = frozenset({
    "svg", "g", "defs", "use", "symbol", "title", "desc",
    "path", "rect", "circle", "ellipse", "line", "polyline", "polygon",
    "text", "tspan", "textpath",
    "image",
    "marker",
    "lineargradient", "radialgradient", "stop",
    "clippath", "mask",
    "pattern",
    "filter",
    "feblend", "fecolormatrix", "fecomponenttransfer", "fecomposite",
    "feconvolvematrix", "fediffuselighting", "fedisplacementmap",
    "feflood", "fegaussianblur", "feimage", "femerge", "femergenode",
    "femorphology", "feoffset", "fespecularlighting", "fetile", "feturbulence",
    "fedistantlight", "fepointlight", "fespotlight",
    "fefunca", "fefuncb", "fefuncg", "fefuncr",
})

# Elements removed together with everything inside them
STRIP_TAGS = frozenset({
    "script", "foreignobject", "iframe", "object", "embed",
    "link", "meta", "style",
    "animate", "animatemotion", "animatetransform", "set",
    "metadata",
})

# Event handlers (on*) are rejected before this table is consulted.
ALLOWED_ATTRIBUTES = frozenset({
    # Core
    "id", "class", "style", "lang", "xml:space", "xml:lang",
    # Geometry
    "x", "y", "x1", "y1", "x2", "y2", "cx", "cy", "r", "rx", "ry",
    "width", "height", "d", "points", "dx", "dy",
    # Presentation
    "fill", "fill-opacity", "fill-rule", "stroke", "stroke-width",
    "stroke-opacity", "stroke-linecap", "stroke-linejoin", "stroke-dasharray",
    "stroke-dashoffset", "stroke-miterlimit",
    "opacity", "color", "visibility", "display", "overflow", "clip-path",
    "clip-rule", "mask", "filter",
    "flood-color", "flood-opacity", "lighting-color",
    # Text
    "text-anchor", "dominant-baseline", "font-family", "font-size",
    "font-weight", "font-style", "font-variant", "letter-spacing",
    "word-spacing", "text-decoration",
    # Transform / coordinate system
    "transform", "viewbox", "preserveaspectratio",
    # Gradients
    "gradientunits", "gradienttransform", "spreadmethod", "offset",
    "stop-color", "stop-opacity", "fx", "fy", "fr",
    # References (values are checked separately)
    "href", "xlink:href",
    # Images
    "image-rendering",
    # Markers, patterns, clipping, masking
    "marker-start", "marker-mid", "marker-end", "markerwidth", "markerheight",
    "markerunits", "refx", "refy", "orient",
    "patternunits", "patterntransform", "patterncontentunits",
    "clippathunits", "maskcontentunits", "maskunits",
    # Filter primitives
    "in", "in2", "result", "type", "values", "mode", "operator",
    "k1", "k2", "k3", "k4", "order", "kernelmatrix", "divisor",
    "edgemode", "bias", "kernelunitlength", "preservealpha",
    "scale", "xchannelselector", "ychannelselector",
    "stddeviation", "stitchtiles", "basefrequency", "numoctaves", "seed",
    "amplitude", "exponent", "intercept", "slope", "tablevalues",
    "azimuth", "elevation", "limitingconeangle", "pointsatx", "pointsaty", "pointsatz",
    "specularexponent", "specularconstant", "diffuseconstant", "surfacescale",
    "lightingcolor", "floodcolor", "floodopacity",
    "color-interpolation-filters", "color-interpolation",
    # Text on a path
    "path", "method", "spacing", "startoffset", "side",
    "lengthadjust", "textlength",
    # Root element
    "xmlns", "xmlns:xlink", "xmlns:svg", "version",
})

# Presentation attributes whose values may hold url() references. Only
# local fragment references (#id) are kept.
URL_ATTRIBUTES = frozenset({
    "fill", "stroke", "filter", "clip-path", "mask",
    "marker-start", "marker-mid", "marker-end",
    "color", "flood-color", "lighting-color",
})

# Attributes whose whole value is a URL
HREF_ATTRIBUTES = frozenset({"href", "xlink:href"})

# Whitespace as ECMAScript's \s and String.prototype.trim() see it, so tag
# boundaries and trimming match the browser-side tooling byte for byte.
# Unlike str.isspace() it includes U+FEFF and excludes U+001C-U+001F and U+0085.
WHITESPACE_CHARS = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)
WHITESPACE = frozenset(WHITESPACE_CHARS)

# The same set as the body of a regex character class
WHITESPACE_RANGES = r"\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
    "abcdefghijklmnopqrstuvwxyz",
)


def ascii_lower(name: str) -> str:
    """Fold ASCII letters to lowercase, leaving every other character alone."""
    return name.translate(_ASCII_LOWER)


def trim(text: str) -> str:
    """Strip leading and trailing WHITESPACE characters."""
    return text.strip(WHITESPACE_CHARS)


def is_allowed_tag(name: str) -> bool:
    return ascii_lower(name) in ALLOWED_TAGS


def is_stripped_tag(name: str) -> bool:
    return ascii_lower(name) in STRIP_TAGS


def is_allowed_attribute(name: str) -> bool:
    return ascii_lower(name) in ALLOWED_ATTRIBUTES


def is_event_handler(name: str) -> bool:
    """True for on* attributes (onclick, ONLOAD, ...)."""
    return ascii_lower(name[:2]) == "on"


def describe_policy() -> dict[str, list[str]]:
    """Return the policy tables as sorted lists, for display and JSON output."""
    return {
        "allowed_tags": sorted(ALLOWED_TAGS),
        "stripped_tags": sorted(STRIP_TAGS),
        "allowed_attributes": sorted(ALLOWED_ATTRIBUTES),
        "url_attributes": sorted(URL_ATTRIBUTES),
    }
