"""Indexed data access over a Mapping.

MappingStore owns a Mapping and keeps two identity indexes next to its
ordered lists: file entries by (path, subplan), and scenario links by
composite identity per file entry. Both indexes are rebuilt after every
mutation so that lookups stay O(1) while list order is preserved.
No remote calls are made here.
"""

import copy
import logging
from typing import Dict, List, Optional, Sequence

from src.test_assets.models import ScenarioIdentity

from .errors import MappingError
from .models import FileEntry, FileKey, Mapping, ScenarioLink

logger = logging.getLogger(__name__)


class MappingStore:
    """In-memory mapping of local files and scenarios to remote identities.

    Example:
        >>> store = MappingStore(Mapping(project_id="7"))
        >>> entry = store.upsert_file(FileEntry(path="artifact/script/login.yaml"))
        >>> store.upsert_link(entry.path, ScenarioLink(entry.path, "happy path", "1001"))
        >>> store.find_link(entry.path, ScenarioIdentity(entry.path, "happy path"))
    """

    def __init__(self, mapping: Mapping):
        self._mapping = mapping
        self._files: Dict[FileKey, FileEntry] = {}
        self._links: Dict[FileKey, Dict[ScenarioIdentity, ScenarioLink]] = {}
        self._rebuild_index()

    @property
    def project_id(self) -> str:
        return self._mapping.project_id

    def get_file(self, path: str, subplan: Optional[str] = None) -> Optional[FileEntry]:
        """Look up the entry of a file (and subplan, for plans)."""
        return self._files.get((path, subplan))

    def upsert_file(self, entry: FileEntry) -> FileEntry:
        """Insert a file entry or replace the entry with the same key in place.

        Raises:
            MappingError: If the replacement would reassign an existing suite id
        """
        existing = self._files.get(entry.key)
        if existing is None:
            self._mapping.files.append(entry)
            logger.debug(f"Added mapping entry for {entry.path}")
        else:
            if existing.suite_id and entry.suite_id != existing.suite_id:
                raise MappingError(
                    f"suite id of {entry.path} cannot change from {existing.suite_id} to {entry.suite_id}"
                )
            index = self._mapping.files.index(existing)
            self._mapping.files[index] = entry
        self._rebuild_index()
        return entry

    def remove_file(self, path: str, subplan: Optional[str] = None) -> Optional[FileEntry]:
        entry = self._files.get((path, subplan))
        if entry is None:
            return None
        self._mapping.files.remove(entry)
        self._rebuild_index()
        return entry

    def links_for(self, path: str, subplan: Optional[str] = None) -> List[ScenarioLink]:
        """Return the links of a file in stored order (empty for unknown files)."""
        entry = self._files.get((path, subplan))
        return entry.all_links() if entry else []

    def find_link(
        self,
        path: str,
        identity: ScenarioIdentity,
        subplan: Optional[str] = None,
    ) -> Optional[ScenarioLink]:
        return self._links.get((path, subplan), {}).get(identity)

    def upsert_link(self, path: str, link: ScenarioLink, subplan: Optional[str] = None) -> ScenarioLink:
        """Insert a link into a file entry or replace the link with the same identity.

        For plan entries the link goes into the plan-step entry matching its
        script path and row; that entry is created on first use.

        Raises:
            MappingError: If the file entry does not exist
        """
        entry = self._require_file(path, subplan)
        container = self._container_for(entry, link, create=True)
        for index, current in enumerate(container.scenarios):
            if current.identity == link.identity:
                container.scenarios[index] = link
                break
        else:
            container.scenarios.append(link)
        self._rebuild_index()
        return link

    def remove_link(
        self,
        path: str,
        identity: ScenarioIdentity,
        subplan: Optional[str] = None,
    ) -> Optional[ScenarioLink]:
        """Remove a link; emptied plan-step entries are pruned."""
        entry = self._require_file(path, subplan)
        link = self.find_link(path, identity, subplan)
        if link is None:
            return None
        container = self._container_for(entry, link, create=False)
        container.scenarios.remove(link)
        if entry.is_plan and not container.scenarios:
            entry.plan_steps.remove(container)
        self._rebuild_index()
        return link

    def reorder_links(
        self,
        path: str,
        identities: Sequence[ScenarioIdentity],
        subplan: Optional[str] = None,
    ) -> None:
        """Reorder the links of a file to follow ``identities``.

        Links not named in ``identities`` keep their relative order after the
        named ones. Plan-step entries are ordered by their first named link.
        """
        entry = self._require_file(path, subplan)
        position = {identity: index for index, identity in enumerate(identities)}
        unplaced = len(position)

        def link_position(link: ScenarioLink) -> int:
            return position.get(link.identity, unplaced)

        if entry.is_plan:
            for step in entry.plan_steps:
                step.scenarios.sort(key=link_position)
            entry.plan_steps.sort(
                key=lambda step: min((link_position(link) for link in step.scenarios), default=unplaced)
            )
        else:
            entry.scenarios.sort(key=link_position)
        self._rebuild_index()

    def snapshot(self) -> Mapping:
        """Return a deep copy of the mapping, safe to persist."""
        return copy.deepcopy(self._mapping)

    def _require_file(self, path: str, subplan: Optional[str]) -> FileEntry:
        entry = self._files.get((path, subplan))
        if entry is None:
            raise MappingError(f"no mapping entry for {path}")
        return entry

    def _container_for(self, entry: FileEntry, link: ScenarioLink, create: bool) -> FileEntry:
        if not entry.is_plan:
            return entry
        step_id = str(link.row)
        for step in entry.plan_steps:
            if step.path == link.file_path and step.step_id == step_id:
                return step
        if not create:
            raise MappingError(f"no plan step {step_id} for {link.file_path} in {entry.path}")
        step = FileEntry(
            path=link.file_path,
            file_type="script",
            suite_id=entry.suite_id,
            suite_url=entry.suite_url,
            step_id=step_id,
        )
        entry.plan_steps.append(step)
        return step

    def _rebuild_index(self) -> None:
        files: Dict[FileKey, FileEntry] = {}
        links: Dict[FileKey, Dict[ScenarioIdentity, ScenarioLink]] = {}
        for entry in self._mapping.files:
            if entry.key in files:
                raise MappingError(f"duplicate mapping entry for {entry.path}")
            files[entry.key] = entry
            entry_links: Dict[ScenarioIdentity, ScenarioLink] = {}
            for link in entry.all_links():
                if link.identity in entry_links:
                    raise MappingError(
                        f"duplicate scenario '{link.scenario_name}' (row {link.row}) in {entry.path}"
                    )
                entry_links[link.identity] = link
            links[entry.key] = entry_links
        self._files = files
        self._links = links
