"""
Unit tests for the condition-compile CLI.

Tests cover:
- Accepted input shapes (single block, list, {"blocks": [...]})
- Display and canonical output
- Exit codes for invalid input and compile errors
"""

import hashlib
import io
import json

import pytest

from cli.compile_blocks import load_blocks, main
from condition_studio.core.errors import ValidationError
from tests.conftest import balance_block, erc20_block, operator_block, time_block


def write_json(tmp_path, data, name="workspace.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestLoadBlocks:
    @pytest.mark.anyio
    async def test_single_block(self):
        assert [b.id for b in load_blocks(time_block())] == ["time-1"]

    @pytest.mark.anyio
    async def test_block_list_and_wrapper(self):
        blocks = [time_block(), balance_block()]

        assert len(load_blocks(blocks)) == 2
        assert len(load_blocks({"blocks": blocks})) == 2

    @pytest.mark.anyio
    async def test_rejects_other_shapes(self):
        with pytest.raises(ValidationError):
            load_blocks("time-1")

    @pytest.mark.anyio
    async def test_rejects_malformed_block(self):
        with pytest.raises(ValidationError) as exc_info:
            load_blocks([{"id": "x"}])

        assert exc_info.value.details["errors"]


class TestMain:
    @pytest.mark.anyio
    async def test_prints_display_json(self, tmp_path, capsys):
        path = write_json(tmp_path, time_block())

        assert main([path]) == 0

        out = capsys.readouterr().out
        assert out.startswith('{\n  "conditionType": "time"')
        assert json.loads(out)["returnValueTest"] == {"comparator": ">=", "value": 1700000000}

    @pytest.mark.anyio
    async def test_canonical_output(self, tmp_path, capsys):
        tree = operator_block("or-1", "or", erc20_block(), balance_block())
        path = write_json(tmp_path, {"blocks": [tree]})

        assert main([path, "--canonical"]) == 0

        canonical, fingerprint = capsys.readouterr().out.splitlines()
        assert canonical.startswith('{"conditionType":"compound","operands":[')
        assert fingerprint == hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    @pytest.mark.anyio
    async def test_reads_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps([balance_block()])))

        assert main(["-"]) == 0
        assert json.loads(capsys.readouterr().out)["conditionType"] == "rpc"

    @pytest.mark.anyio
    async def test_absent_condition_prints_nothing(self, tmp_path, capsys):
        path = write_json(tmp_path, [])

        assert main([path]) == 0
        assert capsys.readouterr().out == ""

    @pytest.mark.anyio
    async def test_invalid_chain_exits_2(self, tmp_path, capsys):
        path = write_json(tmp_path, time_block(chain="999"))

        assert main([path]) == 2

        err = capsys.readouterr().err
        assert "[ERROR] ChainValidationError" in err
        assert "Must be one of: 1, 137, 80002, 11155111" in err

    @pytest.mark.anyio
    async def test_strict_flag(self, tmp_path, capsys):
        tree = erc20_block()
        del tree["properties"]["method"]
        path = write_json(tmp_path, tree)

        assert main([path]) == 0
        assert main([path, "--strict"]) == 2
        assert "[ERROR] CompilationError" in capsys.readouterr().err

    @pytest.mark.anyio
    async def test_missing_file_exits_2(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.json")]) == 2
        assert "Cannot read" in capsys.readouterr().err

    @pytest.mark.anyio
    async def test_invalid_json_exits_2(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        assert main([str(path)]) == 2
        assert "Input is not valid JSON" in capsys.readouterr().err
