"""Tests for united file planning and regeneration."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import fitz  # type: ignore[import]
import pytest

from batesmerge.app.adapters import FileSystemStorageAdapter, PyMuPDFAdapter
from batesmerge.app.unite_service import (
    UniteService,
    check_page_count,
    is_stale,
    plan,
    united_filename,
    validate_coverage,
)
from batesmerge.audit.ledger import AuditLedger
from batesmerge.bates import GapError, PageCountMismatchError, parse_range
from batesmerge.config import Settings
from batesmerge.ingest.discover import group, merge


def _set_mtime(path: Path, mtime: float) -> None:
    os.utime(path, (mtime, mtime))


@pytest.fixture
def service(override_settings: Settings) -> UniteService:
    ledger = AuditLedger(override_settings.get_audit_path())
    return UniteService(PyMuPDFAdapter(), FileSystemStorageAdapter(), ledger, override_settings)


class TestCoverage:
    def test_grouped_series_names_united_file(self) -> None:
        grouped = group(
            [
                "OCA 563-894.pdf",
                "PITCHESS 1-50.pdf",
                "PITCHESS 51-51.pdf",
                "OCA 1-50.pdf",
                "OCA 51-562.pdf",
            ]
        )
        oca = merge(grouped, {})["OCA"]
        validate_coverage("OCA", oca)
        assert united_filename("OCA", oca) == "united OCA 1-894.pdf"

    def test_series_not_starting_at_one(self) -> None:
        files = merge(group(["OCA 25-30.pdf", "OCA 31-50.pdf", "OCA 17-24.pdf"]), {})["OCA"]
        validate_coverage("OCA", files)
        assert united_filename("OCA", files) == "united OCA 17-50.pdf"

    def test_gap_is_reported_with_expected_start(self) -> None:
        files = merge(group(["OCA 1-50.pdf", "OCA 563-894.pdf"]), {})["OCA"]
        with pytest.raises(GapError) as excinfo:
            validate_coverage("OCA", files)
        assert excinfo.value.expected == 51
        assert excinfo.value.previous.name == "OCA 1-50.pdf"
        assert excinfo.value.following.name == "OCA 563-894.pdf"
        assert "51" in str(excinfo.value)

    def test_overlap_is_a_gap(self) -> None:
        files = merge(group(["OCA 1-50.pdf", "OCA 40-60.pdf"]), {})["OCA"]
        with pytest.raises(GapError):
            validate_coverage("OCA", files)

    def test_duplicate_start_is_a_gap(self) -> None:
        files = merge(group(["a/OCA 1-50.pdf", "b/OCA 1-50.pdf"]), {})["OCA"]
        with pytest.raises(GapError) as excinfo:
            validate_coverage("OCA", files)
        assert excinfo.value.expected == 51

    def test_single_file_passes(self) -> None:
        validate_coverage("OCA", group(["OCA 5-9.pdf"])["OCA"])
        validate_coverage("OCA", [])

    def test_padded_series_name_is_unpadded(self) -> None:
        files = group(["COB0002421-COB0003964.pdf"])["COB"]
        assert united_filename("COB", files) == "united COB 2421-3964.pdf"


class TestStaleness:
    def test_missing_output_is_stale(self) -> None:
        assert is_stale(None, [1.0])

    def test_newer_source_is_stale(self) -> None:
        assert is_stale(100.0, [50.0, 150.0])

    def test_equal_timestamps_are_current(self) -> None:
        assert not is_stale(100.0, [100.0, 99.0])

    def test_no_sources_is_current(self) -> None:
        assert not is_stale(None, [])


class TestPlan:
    def test_plan_targets_missing_outputs(self, production_root: Path) -> None:
        from batesmerge.ingest.discover import discover

        storage = FileSystemStorageAdapter()
        targets = plan(discover(production_root), production_root / "united", storage)

        assert [target.output_path.name for target in targets] == [
            "united OCA 1-894.pdf",
            "united PITCHESS 1-51.pdf",
        ]
        oca = targets[0]
        assert [path.name for path in oca.sources] == [
            "OCA 1-50.pdf",
            "OCA 51-562.pdf",
            "OCA 563-894.pdf",
        ]
        assert oca.output_mtime is None
        assert len(oca.source_mtimes) == 3
        assert [path.name for path in oca.superseded] == ["united OCA 1-50.pdf"]
        assert oca.page_count == 894

    def test_plan_skips_current_outputs(self, production_root: Path, make_pdf) -> None:
        from batesmerge.ingest.discover import discover

        series = discover(production_root)
        united_dir = production_root / "united"
        output = make_pdf(united_dir / "united PITCHESS 1-51.pdf", 51)
        for entry in series["PITCHESS"]:
            _set_mtime(entry.path, 1_000_000)
        _set_mtime(output, 2_000_000)

        storage = FileSystemStorageAdapter()
        names = [t.output_path.name for t in plan(series, united_dir, storage)]
        assert names == ["united OCA 1-894.pdf"]

        forced = [t.output_path.name for t in plan(series, united_dir, storage, force=True)]
        assert forced == ["united OCA 1-894.pdf", "united PITCHESS 1-51.pdf"]

        _set_mtime(series["PITCHESS"][1].path, 3_000_000)
        names = [t.output_path.name for t in plan(series, united_dir, storage)]
        assert names == ["united OCA 1-894.pdf", "united PITCHESS 1-51.pdf"]

    def test_plan_raises_on_gap(self, temp_dir: Path, make_pdf) -> None:
        make_pdf(temp_dir / "OCA 1-50.pdf", 1)
        make_pdf(temp_dir / "OCA 563-894.pdf", 1)
        series = group(sorted(temp_dir.iterdir()))
        with pytest.raises(GapError):
            plan(merge(series, {}), temp_dir / "united", FileSystemStorageAdapter())


class TestPageCount:
    def test_matching_count_passes(self, temp_dir: Path, make_pdf) -> None:
        path = make_pdf(temp_dir / "OCA 1-3.pdf", 3)
        check_page_count(path, parse_range("OCA 1-3"), PyMuPDFAdapter())

    def test_mismatch_raises(self, temp_dir: Path, make_pdf) -> None:
        path = make_pdf(temp_dir / "OCA 1-3.pdf", 2)
        with pytest.raises(PageCountMismatchError) as excinfo:
            check_page_count(path, parse_range("OCA 1-3"), PyMuPDFAdapter())
        assert (excinfo.value.expected, excinfo.value.actual) == (3, 2)


class TestUniteService:
    def test_run_writes_united_files(
        self, service: UniteService, production_root: Path
    ) -> None:
        results = service.run(production_root)

        assert [result.output_path.name for result in results] == [
            "united OCA 1-894.pdf",
            "united PITCHESS 1-51.pdf",
        ]
        united = fitz.open(str(production_root / "united" / "united OCA 1-894.pdf"))
        try:
            assert united.page_count == 894
            assert "OCA 51-562 page 1" in united[50].get_text()
        finally:
            united.close()

        # Superseded files are kept unless pruning is requested.
        assert (production_root / "united" / "united OCA 1-50.pdf").exists()
        assert service.plan(production_root) == []

    def test_run_prunes_superseded(self, service: UniteService, production_root: Path) -> None:
        results = service.run(production_root, prune_superseded=True)
        assert [path.name for path in results[0].removed] == ["united OCA 1-50.pdf"]
        assert not (production_root / "united" / "united OCA 1-50.pdf").exists()

    def test_run_records_audit_entries(
        self, service: UniteService, production_root: Path
    ) -> None:
        results = service.run(production_root)
        records = service.ledger.history()  # type: ignore[union-attr]

        assert [record.label for record in records] == ["OCA 1-894", "PITCHESS 1-51"]
        assert records[0].output_path == results[0].output_path
        assert records[0].sha256 == results[0].sha256
        assert [path.name for path in records[0].sources] == [
            "OCA 1-50.pdf",
            "OCA 51-562.pdf",
            "OCA 563-894.pdf",
        ]
        assert service.ledger.verify() == (True, None)  # type: ignore[union-attr]

    def test_page_count_mismatch_blocks_write(
        self, service: UniteService, temp_dir: Path, make_pdf
    ) -> None:
        root = temp_dir / "discovery"
        make_pdf(root / "vol1" / "OCA 1-5.pdf", 5)
        make_pdf(root / "vol1" / "OCA 6-10.pdf", 4)

        with pytest.raises(PageCountMismatchError):
            service.run(root)
        assert not (root / "united").exists()

        results = service.run(root, verify_pages=False)
        assert results[0].pages == 9

    def test_mismatch_in_later_series_writes_nothing(
        self, service: UniteService, temp_dir: Path, make_pdf
    ) -> None:
        root = temp_dir / "discovery"
        make_pdf(root / "vol1" / "AAA 1-2.pdf", 2)
        make_pdf(root / "vol1" / "OCA 1-5.pdf", 4)

        with pytest.raises(PageCountMismatchError) as excinfo:
            service.run(root)

        assert excinfo.value.path.name == "OCA 1-5.pdf"
        assert not (root / "united").exists()
        assert service.ledger.history() == []  # type: ignore[union-attr]

    def test_execute_checks_pages_from_target(
        self, service: UniteService, temp_dir: Path, make_pdf
    ) -> None:
        root = temp_dir / "discovery"
        make_pdf(root / "vol1" / "OCA 1-5.pdf", 4)
        target = service.plan(root)[0]

        with pytest.raises(PageCountMismatchError) as excinfo:
            service.execute(target, verify_pages=True)

        assert (excinfo.value.expected, excinfo.value.actual) == (5, 4)
        assert not target.output_path.exists()

        result = service.execute(target, verify_pages=False)
        assert result.pages == 4
        assert target.output_path.exists()

    def test_verify_collects_problems(
        self, service: UniteService, temp_dir: Path, make_pdf
    ) -> None:
        root = temp_dir / "discovery"
        make_pdf(root / "vol1" / "OCA 1-5.pdf", 5)
        make_pdf(root / "vol1" / "OCA 8-10.pdf", 2)
        make_pdf(root / "vol2" / "COB 1-2.pdf", 2)

        problems = service.verify(root)

        assert len(problems) == 2
        assert any("expected 'OCA 8-10.pdf' to start at 6" in p for p in problems)
        assert any("covers 3 pages but the PDF has 2" in p for p in problems)

    def test_settings_drive_folder_names(
        self, override_settings: Settings, temp_dir: Path, make_pdf
    ) -> None:
        override_settings.produced_dir_name = "final"
        override_settings.united_dir_name = "combined"
        service = UniteService(
            PyMuPDFAdapter(), FileSystemStorageAdapter(), None, override_settings
        )
        root = temp_dir / "discovery"
        make_pdf(root / "vol1" / "final" / "OCA 1-2.pdf", 2)
        make_pdf(root / "vol1" / "OCA 3-4.pdf", 2)
        # A stray copy inside the renamed united folder must not join the series.
        make_pdf(root / "combined" / "OCA 1-2.pdf", 2)

        results = service.run(root)

        assert results[0].output_path == root / "combined" / "united OCA 1-2.pdf"
        assert service.plan(root) == []


def test_unite_requires_sources(temp_dir: Path) -> None:
    with pytest.raises(ValueError):
        PyMuPDFAdapter().unite(temp_dir / "out.pdf", [])


def test_page_counter(temp_dir: Path, make_pdf: Callable[[Path, int], Path]) -> None:
    path = make_pdf(temp_dir / "OCA 1-4.pdf", 4)
    assert PyMuPDFAdapter().get_page_count(path) == 4
