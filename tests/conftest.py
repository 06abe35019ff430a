from __future__ import annotations

import pytest

STYLE_TEXT = """#!/usr/bin/ruby

# Enable all rules by default.
all

# Extend line length, since each sentence should be on a separate line.
rule 'MD013', :line_length => 99999, :ignore_code_blocks => true

# Allow inline html.
exclude_rule 'MD033'

# Allow multiple headers of the same name/value.
exclude_rule 'MD024'

# Allow custom table formats.
exclude_rule 'MD055'
exclude_rule 'MD057'
"""


@pytest.fixture()
def style_text() -> str:
    return STYLE_TEXT
