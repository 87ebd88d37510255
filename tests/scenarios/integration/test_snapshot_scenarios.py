"""End-to-end scenarios against the in-memory sum and random apps."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from snapshot_app_tester.export_evaluation import ExportRegistry
from snapshot_app_tester.snapshot_comparison import compare_snapshot_directories


def _read(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


class _LabelledApp:
    """Sum app variant with several outputs."""

    bound_inputs = ("n", "add")
    file_inputs = ()

    def __init__(self, seed: int | None = None) -> None:
        self.inputs: dict[str, Any] = {"n": 0, "add": 0}
        self.uploads: dict[str, bytes] = {}
        self.registry = ExportRegistry()

    def apply(self, assignments) -> None:
        self.inputs.update(assignments)

    def outputs(self) -> dict[str, Any]:
        n = self.inputs["n"]
        return {"a": n, "b": n * 2, "c": n * 3}


def test_snapshot_files_are_numbered_consecutively(driver_factory) -> None:
    harness = driver_factory()
    driver = harness.driver
    driver.snapshot_init("numbering")

    artifacts = [
        driver.snapshot(),
        driver.snapshot(items={"output": ["sum"]}),
        driver.snapshot(screenshot=False),
        driver.snapshot(items={"export": True}, screenshot=True),
    ]

    assert [artifact.values_path.name for artifact in artifacts] == [
        "001.json",
        "002.json",
        "003.json",
        "004.json",
    ]


def test_peek_reads_never_advance_sequence(driver_factory, tmp_path: Path) -> None:
    driver = driver_factory().driver
    driver.snapshot_init("peek")
    driver.snapshot()

    for index in range(3):
        driver.get_all_values()
        driver.get_value("sum")
        driver.take_screenshot(tmp_path / f"peek-{index}.png")

    assert driver.snapshot().values_path.name == "002.json"


def test_explicit_output_names_select_exactly_those_keys(driver_factory) -> None:
    driver = driver_factory(app_cls=_LabelledApp).driver
    driver.snapshot_init("selected")
    driver.set_inputs(n=2)

    document = _read(driver.snapshot(items={"output": ["a", "b"]}).values_path)

    assert document == {"output": {"a": 2, "b": 4}}


def test_output_true_records_every_output(driver_factory) -> None:
    driver = driver_factory(app_cls=_LabelledApp).driver
    driver.snapshot_init("all-outputs")

    document = _read(driver.snapshot(items={"output": True}).values_path)

    assert set(document) == {"output"}
    assert set(document["output"]) == {"a", "b", "c"}


def test_exports_reflect_accumulated_mutations(driver_factory) -> None:
    driver = driver_factory().driver
    driver.snapshot_init("accumulate")

    driver.set_inputs(n=4)
    driver.set_inputs(add="click")
    driver.set_inputs(add="click")
    driver.set_inputs(n=7, add="click")
    document = _read(driver.snapshot().values_path)

    assert document["export"] == {"nums": [4, 4, 7]}
    assert document["output"] == {"sum": "15"}
    assert document["input"] == {"add": 3, "n": 7}


def test_superseded_assignment_is_not_observable(driver_factory) -> None:
    twice = driver_factory().driver
    twice.snapshot_init("twice")
    twice.set_inputs(n=1)
    twice.set_inputs(n=9)
    twice_path = twice.snapshot(screenshot=False).values_path

    once = driver_factory().driver
    once.snapshot_init("once")
    once.set_inputs(n=9)
    once_path = once.snapshot(screenshot=False).values_path

    assert twice_path.read_bytes() == once_path.read_bytes()


@pytest.mark.parametrize("seed", [100, 7])
def test_seeded_runs_produce_identical_artifacts(
    driver_factory, random_app_cls, tmp_path: Path, seed: int
) -> None:
    def _run(root: Path) -> list[bytes]:
        driver = driver_factory(app_cls=random_app_cls, seed=seed, root=root).driver
        driver.snapshot_init("random")
        driver.snapshot(screenshot=False)
        driver.set_inputs(n=5)
        driver.snapshot(screenshot=False)
        directory = driver.snapshot_dir
        driver.stop()
        return [path.read_bytes() for path in sorted(directory.glob("*.json"))]

    first = _run(tmp_path / "run-1")
    second = _run(tmp_path / "run-2")

    assert len(first) == 2
    assert first == second


def test_recorded_run_compares_clean_against_promoted_expected(
    driver_factory, random_app_cls, tmp_path: Path
) -> None:
    root = tmp_path / "shots"

    def _run() -> None:
        driver = driver_factory(app_cls=random_app_cls, seed=3, root=root).driver
        driver.snapshot_init("replay")
        driver.set_inputs(n=4)
        driver.snapshot()
        driver.stop()

    _run()
    (root / "replay-current").rename(root / "replay-expected")
    _run()

    result = compare_snapshot_directories(root, "replay", compare_screenshots=True)

    assert result.passed
    assert [comparison.name for comparison in result.files] == ["001.json", "001.png"]
