"""
Integration Tests against a real solc binary

Skipped unless py-solc-x already has the configured compiler version
installed (`contractsmith-compile --install-solc` fetches it).

Run with:
    pytest tests/test_solc_integration.py -v
"""

import re
import shutil
from pathlib import Path

import pytest
import solcx

from contractsmith.compiler import CompilationPipeline
from contractsmith.config import AppConfig
from contractsmith.constants import DEFAULT_SOLC_VERSION

REPO_ROOT = Path(__file__).resolve().parent.parent

installed = {str(version) for version in solcx.get_installed_solc_versions()}
pytestmark = pytest.mark.skipif(
    DEFAULT_SOLC_VERSION not in installed,
    reason=f"solc {DEFAULT_SOLC_VERSION} not installed",
)


@pytest.fixture
def config(tmp_path) -> AppConfig:
    shutil.copytree(REPO_ROOT / "templates", tmp_path / "templates")
    config = AppConfig()
    config.template.base_dir = str(tmp_path)
    config.imports.dependency_root = "node_modules"
    return config


def test_bundled_template_compiles(config):
    result = CompilationPipeline.from_config(config).run()

    assert result.ok, result.to_body()
    assert re.match(r"^0x[0-9a-f]+$", result.artifact.bytecode)
    names = {entry.get("name") for entry in result.artifact.abi}
    assert {"mint", "tokenURI", "ownerOf"} <= names


def test_wrong_contract_name_is_not_found(config):
    config.template.contract = "NotInTheTemplate"
    result = CompilationPipeline.from_config(config).run()
    assert result.status_code == 404


def test_unrecognised_import_fails_with_file_not_found(config, tmp_path):
    template = tmp_path / "templates" / "EthTemplate.sol"
    template.write_text(
        'pragma solidity ^0.8.20;\nimport "solmate/tokens/ERC721.sol";\ncontract StonerSharks {}\n',
        encoding="utf-8",
    )
    result = CompilationPipeline.from_config(config).run()

    assert result.error.kind == "compiler_diagnostic_error"
    messages = [d["message"] for d in result.error.details["diagnostics"]]
    assert any("File not found" in message for message in messages)
