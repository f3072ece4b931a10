"""
Catalog Loader

Loads domain walkthrough catalogs (domains, scenarios, variants and trials)
from JSON files.
"""

import json
from dataclasses import dataclass
from pathlib import Path

from mcd_gauge_core.domain.entities import (
    DomainOutcome,
    DomainWalkthrough,
    PerformanceProfile,
    ReferenceBenchmark,
    SuccessCriteria,
    TrialSpecification,
    WalkthroughScenario,
    WalkthroughVariant,
)
from mcd_gauge_core.scoring.domain_criteria import ensure_trial_defaults


DEFAULT_CATALOG_PATH = "tasks/walkthrough_catalog.json"


@dataclass
class WalkthroughCatalog:
    """Catalog definition"""
    catalog_id: str
    catalog_name: str
    description: str
    version: str
    walkthroughs: list[DomainWalkthrough]


def _require(data: dict, fields: list[str], context: str) -> None:
    for field in fields:
        if field not in data:
            raise KeyError(f"Required field '{field}' is missing: {context}")


def _parse_success_criteria(data: dict) -> SuccessCriteria:
    return SuccessCriteria(
        required_elements=list(data.get("required_elements", [])),
        prohibited_elements=list(data.get("prohibited_elements", [])),
        task_completion_expected=data.get("task_completion_expected", True),
        max_token_budget=data.get("max_token_budget", 50),
        max_latency_ms=data.get("max_latency_ms", 500),
        min_accuracy=data.get("min_accuracy"),
    )


def _parse_reference_benchmark(data: dict | None) -> ReferenceBenchmark | None:
    if not data:
        return None
    return ReferenceBenchmark(
        expected_output=data.get("expected_output", ""),
        expected_latency=data.get("expected_latency", 0.0),
        expected_cpu_usage=data.get("expected_cpu_usage", 0.0),
        expected_memory_kb=data.get("expected_memory_kb", 0.0),
        slot_accuracy=data.get("slot_accuracy"),
        notes=data.get("notes", ""),
    )


def _parse_trial(data: dict, domain_id: str) -> TrialSpecification:
    """
    Create a TrialSpecification from dictionary data

    The trial inherits the id of its walkthrough as explicit domain and gets
    its minimum accuracy default from the difficulty table.
    """
    _require(data, ["test_id", "user_input", "success_criteria", "evaluation_method", "difficulty"], "trial")
    trial = TrialSpecification(
        test_id=data["test_id"],
        user_input=data["user_input"],
        success_criteria=_parse_success_criteria(data["success_criteria"]),
        evaluation_method=data["evaluation_method"],
        difficulty=data["difficulty"],
        category=data.get("category", ""),
        notes=data.get("notes", ""),
        domain_id=data.get("domain_id", domain_id),
        reference_benchmark=_parse_reference_benchmark(data.get("reference_benchmark")),
    )
    return ensure_trial_defaults(trial)


def _parse_profile(data: dict | None) -> PerformanceProfile | None:
    if not data:
        return None
    return PerformanceProfile(
        avg_latency=data["avg_latency"],
        avg_tokens=data["avg_tokens"],
        avg_cpu_usage=data["avg_cpu_usage"],
        avg_memory_kb=data["avg_memory_kb"],
        success_rate=data["success_rate"],
        token_efficiency=data.get("token_efficiency"),
    )


def _parse_variant(data: dict, domain_id: str) -> WalkthroughVariant:
    _require(data, ["id", "type", "name", "prompt", "trials"], "variant")
    return WalkthroughVariant(
        id=data["id"],
        type=data["type"],
        name=data["name"],
        prompt=data["prompt"],
        architecture=data.get("architecture", ""),
        trials=[_parse_trial(t, domain_id) for t in data["trials"]],
        expected_profile=_parse_profile(data.get("expected_profile")),
    )


def _parse_scenario(data: dict, domain_id: str) -> WalkthroughScenario:
    _require(data, ["step", "context", "variants"], "scenario")
    return WalkthroughScenario(
        step=data["step"],
        context=data["context"],
        domain=data.get("domain", ""),
        model=data.get("model", ""),
        subsystem=data.get("subsystem", ""),
        variants=[_parse_variant(v, domain_id) for v in data["variants"]],
        mcd_principles=data.get("mcd_principles", []),
        expected_behavior=data.get("expected_behavior", ""),
        fallback_triggers=data.get("fallback_triggers", []),
        quality_metrics=data.get("quality_metrics", []),
        token_budget=data.get("token_budget"),
        memory_constraint=data.get("memory_constraint"),
    )


def _parse_walkthrough_data(data: dict) -> DomainWalkthrough:
    """
    Create a DomainWalkthrough object from dictionary data

    Args:
        data: Walkthrough data dictionary

    Returns:
        DomainWalkthrough
    """
    _require(data, ["id", "domain", "title", "scenarios"], "walkthrough")
    domain_id = data["id"]
    outcomes = {
        tier: DomainOutcome(
            success_criteria=o["success_criteria"],
            performance_target=o["performance_target"],
            fallback_behavior=o["fallback_behavior"],
        )
        for tier, o in data.get("expected_outcomes", {}).items()
    }
    return DomainWalkthrough(
        id=domain_id,
        domain=data["domain"],
        title=data["title"],
        description=data.get("description", ""),
        scenarios=[_parse_scenario(s, domain_id) for s in data["scenarios"]],
        mcd_principles=data.get("mcd_principles", []),
        expected_outcomes=outcomes,
    )


def load_catalog(file_path: str | Path = DEFAULT_CATALOG_PATH) -> WalkthroughCatalog:
    """
    Load a walkthrough catalog JSON

    Args:
        file_path: Path to the catalog JSON file

    Returns:
        WalkthroughCatalog

    Raises:
        FileNotFoundError: If the file does not exist
        KeyError: If a required field is missing
        ValueError: If a difficulty, evaluation method or variant type is invalid
    """
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    required_fields = ["catalog_id", "catalog_name", "version", "walkthroughs"]
    for field in required_fields:
        if field not in data:
            raise KeyError(f"Required field '{field}' is missing: {file_path}")

    return WalkthroughCatalog(
        catalog_id=data["catalog_id"],
        catalog_name=data["catalog_name"],
        description=data.get("description", ""),
        version=data["version"],
        walkthroughs=[_parse_walkthrough_data(w) for w in data["walkthroughs"]],
    )


def load_walkthroughs(file_path: str | Path = DEFAULT_CATALOG_PATH) -> list[DomainWalkthrough]:
    """Get only the walkthrough list from a catalog"""
    return load_catalog(file_path).walkthroughs


def get_available_catalogs(tasks_dir: str = "tasks") -> list[dict]:
    """
    Get a list of available catalogs

    Args:
        tasks_dir: Directory containing catalog JSON files

    Returns:
        list[dict]: List of catalog information
            [{"catalog_id": str, "catalog_name": str, "description": str, "file_path": str, "domain_count": int}, ...]
    """
    tasks_path = Path(tasks_dir)
    if not tasks_path.exists():
        return []

    catalogs = []
    for json_file in sorted(tasks_path.glob("*.json")):
        try:
            with open(json_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            if "catalog_id" in data:
                catalogs.append({
                    "catalog_id": data["catalog_id"],
                    "catalog_name": data.get("catalog_name", data["catalog_id"]),
                    "description": data.get("description", ""),
                    "file_path": str(json_file),
                    "domain_count": len(data.get("walkthroughs", [])),
                })
        except (json.JSONDecodeError, KeyError):
            continue

    return catalogs
