"""
Every module must import cleanly on its own in a fresh interpreter.
"""
import subprocess
import sys

import pytest

MODULES = [
    "adgen.base",
    "adgen.config",
    "adgen.exceptions",
    "adgen.facets",
    "adgen.gemini",
    "adgen.huggingface",
    "adgen.kie",
    "adgen.metrics",
    "adgen.prompt_engine",
    "adgen.provider_factory",
    "adgen.replicate",
    "adgen.pipeline",
    "adgen.pipeline.models",
    "adgen.pipeline.orchestrator",
    "adgen.pipeline.poller",
    "adgen.pipeline.service",
    "adgen.pipeline.routes",
    "adgen.main",
]


class TestStandaloneImport:
    """Import order must not matter."""

    @pytest.mark.parametrize("module", MODULES)
    def test_module_imports_first(self, module):
        completed = subprocess.run(
            [sys.executable, "-c", f"import {module}"],
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert completed.returncode == 0, completed.stderr
