"""Fixtures shared by the example apps.

Every example directory holds an ``app.py`` defining ``app``. Tests ask
for ``example_app`` and get an App built from a fresh run of that file,
so module-level state such as an in-memory shelf starts empty.
"""

import runpy
from pathlib import Path

import pytest

from perch import App


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> App:
    namespace = runpy.run_path(str(Path(request.path).with_name("app.py")))
    app = namespace["app"]
    assert isinstance(app, App)
    return app
