"""Path management utilities for forge-chronicles library."""

from pathlib import Path
from typing import Optional, Union

from .constants import (
    DEFAULT_BROADCAST_DIR,
    DEFAULT_OUT_DIR,
    DEFAULT_RECORDS_DIR,
)


def get_project_root(project_root: Optional[Union[Path, str]] = None) -> Path:
    """
    Resolve the Foundry project root.

    Args:
        project_root: Custom project directory (defaults to current directory)

    Returns:
        Absolute path to the project root
    """
    if project_root is None:
        return Path.cwd()
    return Path(project_root).absolute()


def get_broadcast_path(
    project_root: Union[Path, str],
    script_name: str,
    chain_id: Union[int, str],
    broadcast_dir: str = DEFAULT_BROADCAST_DIR,
) -> Path:
    """
    Get the path of the latest broadcast file for a script run on a chain.

    Returns:
        Path to <broadcast_dir>/<script_name>/<chain_id>/run-latest.json
    """
    return Path(project_root) / broadcast_dir / script_name / str(chain_id) / "run-latest.json"


def get_ledger_path(
    project_root: Union[Path, str],
    chain_id: Union[int, str],
    records_dir: str = DEFAULT_RECORDS_DIR,
) -> Path:
    """
    Get the path of a chain's deployment ledger.

    Returns:
        Path to <records_dir>/<chain_id>.json
    """
    return Path(project_root) / records_dir / f"{chain_id}.json"


def get_artifact_path(
    project_root: Union[Path, str],
    contract_name: str,
    out_dir: str = DEFAULT_OUT_DIR,
) -> Path:
    """
    Get the path of a contract's compiled artifact.

    Returns:
        Path to <out_dir>/<contract_name>.sol/<contract_name>.json
    """
    return Path(project_root) / out_dir / f"{contract_name}.sol" / f"{contract_name}.json"
