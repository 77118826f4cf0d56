"""Deployment metadata store for kitty-deploy library."""

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .config import load_deployment_addresses
from .constants import ADDRESS_RE, ARCHIVED_DIRECTORIES
from .exceptions import ConfigError
from .paths import ScriptPaths, directory_has_files
from .types import DeploymentRecord

logger = logging.getLogger(__name__)


class MetadataStore:
    """
    Keyed registry of deployed contracts, backed by one JSON file per contract.

    The in-memory map is what the resolver and later actions read; the files
    under the deployments directory carry it from one run to the next.
    """

    def __init__(self, paths: ScriptPaths):
        """
        Initialize an empty store.

        Args:
            paths: Project layout; records live in paths.deployments
        """
        self._paths = paths
        self._records: Dict[str, DeploymentRecord] = {}

    @property
    def deployments_dir(self) -> Path:
        return self._paths.deployments

    def __contains__(self, contract_name: object) -> bool:
        return contract_name in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, contract_name: str) -> Optional[DeploymentRecord]:
        return self._records.get(contract_name)

    def records(self) -> List[DeploymentRecord]:
        """All records in insertion order."""
        return list(self._records.values())

    def save(self, record: DeploymentRecord) -> None:
        """
        Persist a record and make it visible to the rest of the run.

        Overwrites any previous record for the same contract name. A failed
        write is logged; the in-memory record is kept either way.

        Args:
            record: Deployment metadata to store
        """
        self._records[record.contract_name] = record

        record_path = self.deployments_dir / f"{record.contract_name}.json"
        try:
            self.deployments_dir.mkdir(parents=True, exist_ok=True)
            with open(record_path, "w") as f:
                json.dump(record.to_json_dict(), f, indent=2)
        except OSError as e:
            logger.error("Failed to write deployment record %s: %s", record_path, e)

    def load_all(self, network_name: str, byo_addresses: bool = False) -> Dict[str, DeploymentRecord]:
        """
        Replace the in-memory map with every record file on disk.

        Args:
            network_name: Active network, used to select bring-your-own addresses
            byo_addresses: Override stored addresses from deploymentAddresses.*

        Returns:
            Mapping of contract name -> record (a copy of the store's contents)
        """
        self._records = {}

        if self.deployments_dir.is_dir():
            for record_file in sorted(self.deployments_dir.glob("*.json")):
                with open(record_file) as f:
                    record = DeploymentRecord.from_json_dict(json.load(f))
                self._records[record.contract_name] = record

        if byo_addresses:
            self._apply_address_overrides(network_name)

        return dict(self._records)

    def _apply_address_overrides(self, network_name: str) -> None:
        try:
            overrides = load_deployment_addresses(self._paths.root)
        except (ConfigError, OSError) as e:
            logger.error("Failed to load deployment addresses: %s", e)
            return

        if not overrides or network_name not in overrides:
            return

        for contract_name, address in overrides[network_name].items():
            record = self._records.get(contract_name)
            if record is None:
                continue
            if not ADDRESS_RE.match(address):
                logger.warning(
                    "Ignoring invalid override address %r for %s", address, contract_name
                )
                continue
            record.address = address

    def archive(self) -> Optional[Path]:
        """
        Snapshot build outputs and deployment records, then clear them.

        Only runs when the deployments directory holds records. Every non-empty
        directory among artifacts, deployments and typechain is then copied
        under archive/<UTC timestamp>/, after which all three live directories
        are removed. The in-memory map is cleared as well.

        Returns:
            Path of the new snapshot, or None if there were no deployments
        """
        if not directory_has_files(self.deployments_dir):
            return None

        populated = [
            name for name in ARCHIVED_DIRECTORIES if directory_has_files(getattr(self._paths, name))
        ]
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S.%fZ")
        snapshot_dir = self._paths.archive / timestamp
        suffix = 1
        while snapshot_dir.exists():
            snapshot_dir = self._paths.archive / f"{timestamp}-{suffix}"
            suffix += 1
        snapshot_dir.mkdir(parents=True)

        for name in populated:
            shutil.copytree(getattr(self._paths, name), snapshot_dir / name)

        for name in ARCHIVED_DIRECTORIES:
            live_dir = getattr(self._paths, name)
            if live_dir.exists():
                shutil.rmtree(live_dir)

        self._records = {}
        logger.info("Archived %s to %s", ", ".join(populated), snapshot_dir)
        return snapshot_dir
