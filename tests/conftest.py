import sys
from pathlib import Path

import pytest
from helpers import mark_by_layer

try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass


@pytest.fixture(autouse=True)
def _ensure_src_on_syspath():
    # src layout: the package is importable without an editable install
    src_path = Path(__file__).resolve().parents[1] / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))
    yield


PACKAGE_TESTS = Path(__file__).parent / "findings_engine"


def pytest_collection_modifyitems(config, items):
    mark_by_layer(items, {
        PACKAGE_TESTS / "core": pytest.mark.unit,
        PACKAGE_TESTS / "shared": pytest.mark.unit,
        PACKAGE_TESTS / "infra": pytest.mark.integration,
        PACKAGE_TESTS / "app": pytest.mark.e2e,
    })
