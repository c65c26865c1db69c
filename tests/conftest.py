"""Shared fixtures: a minimal certificate template that passes every check."""

from __future__ import annotations

import pytest

TEMPLATE = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="800" height="600" viewBox="0 0 800 600">'
    '<rect x="0" y="0" width="800" height="600" fill="#ffffff"></rect>'
    '<text x="40" y="80" font-size="32">{{CERT_TYPE}}</text>'
    '<text x="40" y="140">Iteration {{ITERATION}}</text>'
    '<text x="40" y="200">{{TEAM_MEMBERS}}</text>'
    '<text x="40" y="260">{{ACCOUNT}}</text>'
    '<text x="40" y="320">{{STATUS}}</text>'
    '<text x="40" y="380">#{{TOKEN_ID}}</text>'
    '</svg>'
)


@pytest.fixture
def valid_template():
    """Template that sanitizes to itself with no issues."""
    return TEMPLATE


@pytest.fixture
def template_with():
    """Factory that inserts extra markup right after the opening <svg> tag."""
    def _make(markup: str) -> str:
        head, sep, tail = TEMPLATE.partition(">")
        return f"{head}{sep}{markup}{tail}"
    return _make
