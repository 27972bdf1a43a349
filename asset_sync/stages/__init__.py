# =============================================================================
# Pipeline Stages
# =============================================================================
# Each stage transforms the pipeline state and reports what it did:
# 0 purge (on demand), 1-5 folders, 6-7 asset discovery, 8 reconcile,
# 9 verify references, 10 deduplicate, 11 refresh formats (on demand).
# =============================================================================

from .base import Stage, StageContext, StageOutcome, delete_rows, no_confirm
from .folders import discover_catalog_folders, discover_source_folders, flatten_folder_tree
from .mapping import find_duplicate_folder_names, map_folders
from .materialize import materialize_folders
from .assets import discover_source_assets, partition_by_provider
from .reconcile import ReconciliationPlan, apply_plan, plan_reconciliation
from .verify import verify_references
from .dedupe import group_by_base_name, plan_deduplication
from .registry import STAGES, get_stage, select_stages

__all__ = [
    "Stage",
    "StageContext",
    "StageOutcome",
    "delete_rows",
    "no_confirm",
    "discover_source_folders",
    "discover_catalog_folders",
    "flatten_folder_tree",
    "map_folders",
    "find_duplicate_folder_names",
    "materialize_folders",
    "discover_source_assets",
    "partition_by_provider",
    "ReconciliationPlan",
    "plan_reconciliation",
    "apply_plan",
    "verify_references",
    "group_by_base_name",
    "plan_deduplication",
    "STAGES",
    "get_stage",
    "select_stages",
]
