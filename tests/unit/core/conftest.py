"""Shared fixtures for core unit tests"""

import pytest

from mdforge.core.diagnostics import Diagnostics
from mdforge.core.parse import parse_markdown


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

## Heading 2

- item one
- item two

```python
print("hello")
```

---

Footer paragraph.
"""

SAMPLE_FM_MD = """\
---
title: Test Doc
author: jdoe
tags: [a, b]
avatar: /img/jdoe.png
---

# Title

Body content.
"""


@pytest.fixture(name="diagnostics")
def diagnostics_fixture():
    return Diagnostics()


@pytest.fixture(name="parse")
def parse_fixture():
    """Parse a markdown body into a Document with the default preset."""
    return lambda body: parse_markdown(body)


@pytest.fixture(name="sample_doc")
def sample_doc_fixture(parse):
    return parse(SAMPLE_MD)


@pytest.fixture(name="sample_fm_md")
def sample_fm_md_fixture():
    return SAMPLE_FM_MD
