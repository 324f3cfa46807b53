"""Compiled contract artifacts for forge-chronicles library."""

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from .constants import DEFAULT_OUT_DIR
from .exceptions import ArtifactBuildError, ArtifactNotFoundError
from .paths import get_artifact_path


class ArtifactSource(Protocol):
    """Provider of contract ABIs."""

    def build(self) -> None:
        """Bring compiled artifacts up to date."""
        ...

    def load_abi(self, contract_name: str) -> List[Dict[str, Any]]:
        """Return the ABI of a compiled contract."""
        ...


class ForgeArtifacts:
    """ArtifactSource reading Foundry's `out/` directory."""

    def __init__(
        self,
        project_root: Optional[Union[Path, str]] = None,
        out_dir: str = DEFAULT_OUT_DIR,
    ):
        self.project_root = Path(project_root) if project_root is not None else Path.cwd()
        self.out_dir = out_dir

    def build(self) -> None:
        """
        Run `forge build` so ABIs match the deployed sources.

        Raises:
            ArtifactBuildError: If forge is missing or compilation fails
        """
        try:
            subprocess.run(
                ["forge", "build"],
                cwd=self.project_root,
                check=True,
                capture_output=True,
            )
        except subprocess.CalledProcessError as e:
            raise ArtifactBuildError(f"forge build failed: {e.stderr.decode()}") from e
        except FileNotFoundError as e:
            raise ArtifactBuildError("forge not found; install foundry (https://getfoundry.sh)") from e

    def load_abi(self, contract_name: str) -> List[Dict[str, Any]]:
        """
        Read a contract's ABI from `<out>/<Name>.sol/<Name>.json`.

        Raises:
            ArtifactNotFoundError: If the artifact file does not exist
        """
        artifact_path = get_artifact_path(self.project_root, contract_name, self.out_dir)
        try:
            with open(artifact_path) as f:
                return json.load(f)["abi"]
        except FileNotFoundError as e:
            raise ArtifactNotFoundError(
                f"Artifact for {contract_name} not found at {artifact_path}"
            ) from e
