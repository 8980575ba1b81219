"""
Shared fixtures: an on-disk template workspace and a stand-in solc backend.

FakeSolc mimics the parts of solc's standard-JSON behaviour the pipeline
depends on:
- every `import "<path>";` whose path is not among the input sources is
  reported as `Source "<path>" not found: File import callback not supported`
  and no contracts are emitted;
- a source containing `SYNTAX_ERROR` yields a ParserError;
- a source containing `WARN_ME` yields a warning;
- otherwise every `contract <Name>` in every source is emitted with a small
  ABI and a bytecode object derived deterministically from the source text.
"""

import hashlib
import json
import re
from pathlib import Path

import pytest

from contractsmith.compiler import (
    CompilationInvoker,
    CompilationPipeline,
    NamespaceImportResolver,
    SolcBackend,
    TemplateRenderer,
    TemplateStore,
)

IMPORT_RE = re.compile(r'^\s*import\s+"([^"]+)"\s*;', re.MULTILINE)
CONTRACT_RE = re.compile(r'\bcontract\s+([A-Za-z_][A-Za-z0-9_]*)')
FUNCTION_RE = re.compile(r'\bfunction\s+([A-Za-z_][A-Za-z0-9_]*)')


class FakeSolc(SolcBackend):
    """Records every input document it is given."""

    def __init__(self, raw_output=None):
        self.inputs = []
        self.raw_output = raw_output

    def compile_json(self, input_json: str) -> str:
        document = json.loads(input_json)
        self.inputs.append(document)
        if self.raw_output is not None:
            return self.raw_output

        sources = document["sources"]
        errors = []
        for name, source in sources.items():
            content = source["content"]
            for path in IMPORT_RE.findall(content):
                if path not in sources:
                    message = f'Source "{path}" not found: File import callback not supported'
                    errors.append({
                        "component": "general",
                        "errorCode": "6275",
                        "formattedMessage": f"ParserError: {message}\n --> {name}:1:1:\n",
                        "message": message,
                        "severity": "error",
                        "sourceLocation": {"file": name, "start": 0, "end": 1},
                        "type": "ParserError",
                    })
            if "SYNTAX_ERROR" in content:
                errors.append({
                    "component": "general",
                    "errorCode": "2314",
                    "formattedMessage": f"ParserError: Expected ';' but got identifier\n --> {name}:3:1:\n",
                    "message": "Expected ';' but got identifier",
                    "severity": "error",
                    "sourceLocation": {"file": name, "start": 10, "end": 22},
                    "type": "ParserError",
                })
            if "WARN_ME" in content:
                errors.append({
                    "component": "general",
                    "errorCode": "2072",
                    "formattedMessage": "Warning: Unused local variable.\n",
                    "message": "Unused local variable.",
                    "severity": "warning",
                    "sourceLocation": {"file": name, "start": 0, "end": 1},
                    "type": "Warning",
                })

        output = {"sources": {}}
        if errors:
            output["errors"] = errors
        if any(e["severity"] == "error" for e in errors):
            return json.dumps(output)

        output["contracts"] = {}
        for index, (name, source) in enumerate(sources.items()):
            content = source["content"]
            output["sources"][name] = {"id": index}
            output["contracts"][name] = {
                contract: {
                    "abi": [
                        {"type": "function", "name": fn, "inputs": [], "outputs": [], "stateMutability": "nonpayable"}
                        for fn in FUNCTION_RE.findall(content)
                    ],
                    "evm": {
                        "bytecode": {
                            "object": "6080" + hashlib.sha256(f"{name}:{contract}:{content}".encode()).hexdigest(),
                            "linkReferences": {},
                        },
                    },
                }
                for contract in CONTRACT_RE.findall(content)
            }
        return json.dumps(output)


TEMPLATE = '''// SPDX-License-Identifier: MIT
pragma solidity ${SOLIDITY_PRAGMA};

contract StonerSharks {
    string public constant name = "${TOKEN_NAME}";
    function mint() external {}
    function withdraw() external {}
}
'''

OZ_OWNABLE = '''// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

contract Ownable {
    function owner() public view returns (address) {}
}
'''

VARIABLES = {"SOLIDITY_PRAGMA": "^0.8.20", "TOKEN_NAME": "Stoner Sharks"}


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Template directory plus a dependency root holding one OpenZeppelin file."""
    (tmp_path / "templates").mkdir()
    (tmp_path / "templates" / "EthTemplate.sol").write_text(TEMPLATE, encoding="utf-8")
    access = tmp_path / "deps" / "@openzeppelin" / "contracts" / "access"
    access.mkdir(parents=True)
    (access / "Ownable.sol").write_text(OZ_OWNABLE, encoding="utf-8")
    return tmp_path


@pytest.fixture
def fake_solc() -> FakeSolc:
    return FakeSolc()


@pytest.fixture
def resolvers():
    """Every resolver handed out by the pipeline, in creation order."""
    return []


@pytest.fixture
def make_pipeline(workspace, fake_solc, resolvers):
    def factory(contract_name: str = "StonerSharks", variables=None, backend=None) -> CompilationPipeline:
        def resolver_factory():
            resolver = NamespaceImportResolver(workspace / "deps", ("@openzeppelin",))
            resolvers.append(resolver)
            return resolver

        return CompilationPipeline(
            store=TemplateStore(workspace / "templates"),
            renderer=TemplateRenderer(VARIABLES if variables is None else variables),
            invoker=CompilationInvoker(backend or fake_solc),
            resolver_factory=resolver_factory,
            template_name="EthTemplate.sol",
            contract_name=contract_name,
        )
    return factory
