from __future__ import annotations

import os
import sys

import pytest


@pytest.fixture(autouse=True, scope='session')
def _pytest_readline_workaround():
    # https://github.com/pytest-dev/pytest/issues/12888#issuecomment-2764756330

    # is the workaround even needed?
    assert 'readline' in sys.modules

    os.environ['COLUMNS'] = os.environ['LINES'] = ''
    del os.environ['COLUMNS'], os.environ['LINES']
