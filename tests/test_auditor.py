# =============================================================================
# CHAINWRIGHT AUDITOR TESTS
# =============================================================================
# Artifact loading, size ranking, threshold flags and report formatting.
# =============================================================================

import json

import pytest

from src.core.auditor import (
    OVER_LIMIT_MARKER,
    audit_artifacts,
    format_report,
    load_artifact,
    pad,
)
from src.core.errors import DirectoryUnreadable, MalformedArtifact
from src.domain.models import AuditEntry


class TestLoadArtifact:
    """Tests for load_artifact()."""

    def test_valid(self, artifact_dir):
        record = load_artifact(artifact_dir / "Medium.json")
        assert record.contract_name == "Medium"
        assert record.size_bytes == 2000

    def test_missing_bytecode(self, tmp_path):
        path = tmp_path / "Broken.json"
        path.write_text(json.dumps({"contractName": "Broken"}))
        with pytest.raises(MalformedArtifact) as exc_info:
            load_artifact(path)
        assert exc_info.value.field == "deployedBytecode"
        assert exc_info.value.path == path

    def test_missing_name(self, tmp_path):
        path = tmp_path / "Broken.json"
        path.write_text(json.dumps({"deployedBytecode": "0x00"}))
        with pytest.raises(MalformedArtifact) as exc_info:
            load_artifact(path)
        assert exc_info.value.field == "contractName"

    def test_not_json(self, tmp_path):
        path = tmp_path / "Broken.json"
        path.write_text("module.exports = {}")
        with pytest.raises(MalformedArtifact):
            load_artifact(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "Broken.json"
        path.write_text("[1, 2]")
        with pytest.raises(MalformedArtifact):
            load_artifact(path)


class TestAuditArtifacts:
    """Tests for audit_artifacts()."""

    @pytest.mark.asyncio
    async def test_sizes_sorted_and_flagged(self, artifact_dir):
        entries = await audit_artifacts(artifact_dir, 12000)
        assert [e.size_bytes for e in entries] == [24000, 2000, 20]
        assert [e.contract_name for e in entries] == ["Large", "Medium", "Small"]
        assert [e.over_limit for e in entries] == [True, False, False]

    @pytest.mark.asyncio
    async def test_equal_to_threshold_not_flagged(self, artifact_dir):
        entries = await audit_artifacts(artifact_dir, 24000)
        assert not any(e.over_limit for e in entries)

    @pytest.mark.asyncio
    async def test_ties_broken_by_name(self, tmp_path, write_artifact):
        for name in ("Zeta", "Alpha", "Mid"):
            write_artifact(tmp_path, name, 100)
        entries = await audit_artifacts(tmp_path, 1000)
        assert [e.contract_name for e in entries] == ["Alpha", "Mid", "Zeta"]

    @pytest.mark.asyncio
    async def test_empty_directory(self, tmp_path):
        assert await audit_artifacts(tmp_path, 100) == []

    @pytest.mark.asyncio
    async def test_non_json_files_ignored(self, artifact_dir):
        (artifact_dir / "README.md").write_text("# notes")
        (artifact_dir / "nested").mkdir()
        entries = await audit_artifacts(artifact_dir, 12000)
        assert len(entries) == 3

    @pytest.mark.asyncio
    async def test_missing_directory(self, tmp_path):
        with pytest.raises(DirectoryUnreadable) as exc_info:
            await audit_artifacts(tmp_path / "missing", 100)
        assert exc_info.value.path == tmp_path / "missing"

    @pytest.mark.asyncio
    async def test_file_instead_of_directory(self, artifact_dir):
        with pytest.raises(DirectoryUnreadable):
            await audit_artifacts(artifact_dir / "Small.json", 100)

    @pytest.mark.asyncio
    async def test_malformed_aborts_by_default(self, artifact_dir):
        (artifact_dir / "Broken.json").write_text(json.dumps({"contractName": "Broken"}))
        with pytest.raises(MalformedArtifact):
            await audit_artifacts(artifact_dir, 12000)

    @pytest.mark.asyncio
    async def test_malformed_skipped_when_not_strict(self, artifact_dir):
        (artifact_dir / "Broken.json").write_text(json.dumps({"contractName": "Broken"}))
        entries = await audit_artifacts(artifact_dir, 12000, strict=False)
        assert [e.contract_name for e in entries] == ["Large", "Medium", "Small"]

    @pytest.mark.asyncio
    async def test_negative_threshold(self, artifact_dir):
        with pytest.raises(ValueError):
            await audit_artifacts(artifact_dir, -1)

    @pytest.mark.asyncio
    async def test_repeatable(self, artifact_dir):
        """Two runs on an unchanged directory give identical reports."""
        first = format_report(await audit_artifacts(artifact_dir, 12000))
        second = format_report(await audit_artifacts(artifact_dir, 12000))
        assert "\n".join(first).encode() == "\n".join(second).encode()


class TestPad:
    """Tests for pad()."""

    def test_right_pad(self):
        assert pad("Root", 8, "-") == "Root----"

    def test_left_pad(self):
        assert pad("Root", -8, "-") == "----Root"

    def test_default_fill(self):
        assert pad("ab", 4) == "ab  "

    def test_only_first_fill_char(self):
        assert pad("ab", 4, "xyz") == "abxx"

    def test_never_truncates(self):
        assert pad("ValidatorManagerContract", 5, "-") == "ValidatorManagerContract"

    def test_exact_width(self):
        assert pad("abcd", 4, "-") == "abcd"


class TestFormatReport:
    """Tests for format_report()."""

    def test_lines(self):
        entries = [
            AuditEntry(contract_name="RootChain", size_bytes=30000, over_limit=True),
            AuditEntry(contract_name="CryptoMons", size_bytes=9000),
        ]
        lines = format_report(entries)
        assert lines == [
            "RootChain----------------30000",
            OVER_LIMIT_MARKER,
            "CryptoMons---------------9000",
        ]

    def test_empty(self):
        assert format_report([]) == []
