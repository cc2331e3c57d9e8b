import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent


@pytest.mark.parametrize(
    "module",
    [
        "di.container",
        "api.shared.db",
        "api.shared.identity",
        "api.features.conversation.router",
        "api.main",
    ],
)
def test_module_imports_in_fresh_interpreter(module):
    # Each entry point must load first without hitting a partially initialized container
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=ROOT,
        capture_output=True,
        text=True,
        timeout=60,
    )
    assert result.returncode == 0, result.stderr
