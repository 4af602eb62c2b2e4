"""Shared fixtures for core unit tests"""

from datetime import datetime

import pytest

from noteblocks.core.sources import MemorySource


SAMPLE_NOTE = """\
---
tags: [daily]
---
> [!note] Reminder
> call the bank
# Plan
Some intro.
## Details
More detail.
- [ ] swallowed todo


- [ ] buy milk
- [x] paid rent
```python
# not a header
print("hi")
```
See [[Project|the project]] today.
trailing text
"""

MTIME = datetime(2024, 5, 1, 9, 30)


@pytest.fixture(name="sample_note")
def sample_note_fixture():
    return SAMPLE_NOTE


@pytest.fixture(name="source")
def source_fixture():
    """Two readable notes with fixed mtimes."""
    src = MemorySource()
    src.add("daily/2024-05-01.md", SAMPLE_NOTE, MTIME)
    src.add("inbox.md", "- [ ] reply to Ana\n[[daily/2024-05-01]]\n", datetime(2024, 5, 2))
    return src
