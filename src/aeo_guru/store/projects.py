"""
Project registry and semantic-core notes, kept in a flat JSON file.

File layout:
    {"projects": [{id, name, rootUrl, sitemapUrl, createdAt}, ...],
     "cores": [{projectId, semanticCoreYaml, manualNotes, clusterNotes, updatedAt}, ...]}
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urldefrag, urlparse

logger = logging.getLogger(__name__)

PROJECT_ID_RE = re.compile(r"^[a-zA-Z0-9-_]+$")

MAX_CORE_YAML_CHARS = 20000
MAX_MANUAL_NOTES_CHARS = 8000
MAX_LABEL_OVERRIDE_CHARS = 160
MAX_CLUSTER_NOTE_CHARS = 4000
MAX_CLUSTER_KEYWORDS = 20
MAX_KEYWORD_CHARS = 80


class ProjectExistsError(Exception):
    """A project with this ID is already registered."""


class ProjectNotFoundError(Exception):
    """No project with this ID is registered."""


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Project:
    id: str
    root_url: str
    name: Optional[str] = None
    sitemap_url: Optional[str] = None
    created_at: str = field(default_factory=_utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "rootUrl": self.root_url,
            "sitemapUrl": self.sitemap_url,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=data["id"],
            root_url=data.get("rootUrl", ""),
            name=data.get("name"),
            sitemap_url=data.get("sitemapUrl"),
            created_at=data.get("createdAt") or _utc_now_iso(),
        )


@dataclass
class ClusterNote:
    """Manual overrides for one cluster of the semantic core."""
    label_override: Optional[str] = None
    note: Optional[str] = None
    keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"labelOverride": self.label_override, "note": self.note, "keywords": list(self.keywords)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterNote":
        return cls(
            label_override=data.get("labelOverride"),
            note=data.get("note"),
            keywords=list(data.get("keywords") or []),
        )


@dataclass
class ProjectCore:
    """Edited semantic core for a project."""
    project_id: str
    semantic_core_yaml: str = ""
    manual_notes: str = ""
    cluster_notes: Dict[str, ClusterNote] = field(default_factory=dict)
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectId": self.project_id,
            "semanticCoreYaml": self.semantic_core_yaml,
            "manualNotes": self.manual_notes,
            "clusterNotes": {cid: note.to_dict() for cid, note in self.cluster_notes.items()},
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectCore":
        return cls(
            project_id=data["projectId"],
            semantic_core_yaml=data.get("semanticCoreYaml") or "",
            manual_notes=data.get("manualNotes") or "",
            cluster_notes={
                cid: ClusterNote.from_dict(note or {})
                for cid, note in (data.get("clusterNotes") or {}).items()
            },
            updated_at=data.get("updatedAt"),
        )


def normalize_project_url(url: str) -> str:
    """
    Validate an http(s) URL and drop its fragment.

    Raises:
        ValueError: If the URL is not absolute http(s)
    """
    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid URL: {url!r}")
    return urldefrag(url)[0]


def validate_project_id(project_id: str) -> str:
    if not project_id or not PROJECT_ID_RE.match(project_id):
        raise ValueError(
            "Project id can only include letters, numbers, dashes and underscores"
        )
    return project_id


def validate_cluster_note(cluster_id: str, note: ClusterNote) -> None:
    """
    Raises:
        ValueError: If any field exceeds its limit
    """
    if note.label_override and len(note.label_override) > MAX_LABEL_OVERRIDE_CHARS:
        raise ValueError(f"Label override for {cluster_id} exceeds {MAX_LABEL_OVERRIDE_CHARS} characters")
    if note.note and len(note.note) > MAX_CLUSTER_NOTE_CHARS:
        raise ValueError(f"Note for {cluster_id} exceeds {MAX_CLUSTER_NOTE_CHARS} characters")
    if len(note.keywords) > MAX_CLUSTER_KEYWORDS:
        raise ValueError(f"Cluster {cluster_id} has more than {MAX_CLUSTER_KEYWORDS} keywords")
    for keyword in note.keywords:
        if not keyword or len(keyword) > MAX_KEYWORD_CHARS:
            raise ValueError(f"Keywords for {cluster_id} must be 1-{MAX_KEYWORD_CHARS} characters")


def validate_core(core: ProjectCore) -> None:
    """
    Raises:
        ValueError: If the semantic core or notes exceed their limits
    """
    if len(core.semantic_core_yaml) > MAX_CORE_YAML_CHARS:
        raise ValueError(f"Semantic core YAML exceeds {MAX_CORE_YAML_CHARS} characters")
    if len(core.manual_notes) > MAX_MANUAL_NOTES_CHARS:
        raise ValueError(f"Manual notes exceed {MAX_MANUAL_NOTES_CHARS} characters")
    for cluster_id, note in core.cluster_notes.items():
        validate_cluster_note(cluster_id, note)


class ProjectStore:
    """JSON-file backed store for projects and their semantic cores."""

    def __init__(self, path: str = "data/projects.json"):
        self.path = Path(path)

    def _read(self) -> Dict[str, List[Dict[str, Any]]]:
        if not self.path.exists():
            return {"projects": [], "cores": []}

        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                logger.warning(f"Unreadable project store {self.path}: {e}")
                return {"projects": [], "cores": []}

        # Older files hold a bare list of projects
        if isinstance(data, list):
            return {"projects": data, "cores": []}
        return {"projects": data.get("projects") or [], "cores": data.get("cores") or []}

    def _write(self, data: Dict[str, List[Dict[str, Any]]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def list_projects(self) -> List[Project]:
        return [Project.from_dict(item) for item in self._read()["projects"]]

    def get_project(self, project_id: str) -> Project:
        """
        Raises:
            ProjectNotFoundError: If the project is not registered
        """
        for item in self._read()["projects"]:
            if item.get("id") == project_id:
                return Project.from_dict(item)
        raise ProjectNotFoundError(project_id)

    def add_project(
        self,
        project_id: str,
        root_url: str,
        name: Optional[str] = None,
        sitemap_url: Optional[str] = None
    ) -> Project:
        """
        Register a project.

        Raises:
            ValueError: Invalid ID or URLs
            ProjectExistsError: If the ID is taken
        """
        validate_project_id(project_id)
        project = Project(
            id=project_id,
            root_url=normalize_project_url(root_url),
            name=name or None,
            sitemap_url=normalize_project_url(sitemap_url) if sitemap_url else None,
        )

        data = self._read()
        if any(item.get("id") == project_id for item in data["projects"]):
            raise ProjectExistsError(project_id)

        data["projects"].append(project.to_dict())
        self._write(data)
        logger.info(f"Added project {project_id} ({project.root_url})")
        return project

    def update_project(
        self,
        project_id: str,
        root_url: Optional[str] = None,
        name: Optional[str] = None,
        sitemap_url: Optional[str] = None
    ) -> Project:
        """
        Update the given fields of a project.

        Raises:
            ProjectNotFoundError: If the project is not registered
        """
        data = self._read()
        for index, item in enumerate(data["projects"]):
            if item.get("id") != project_id:
                continue
            project = Project.from_dict(item)
            if root_url:
                project.root_url = normalize_project_url(root_url)
            if name:
                project.name = name
            if sitemap_url:
                project.sitemap_url = normalize_project_url(sitemap_url)
            data["projects"][index] = project.to_dict()
            self._write(data)
            return project
        raise ProjectNotFoundError(project_id)

    def delete_project(self, project_id: str) -> None:
        """
        Remove a project and its semantic core.

        Raises:
            ProjectNotFoundError: If the project is not registered
        """
        data = self._read()
        remaining = [item for item in data["projects"] if item.get("id") != project_id]
        if len(remaining) == len(data["projects"]):
            raise ProjectNotFoundError(project_id)
        data["projects"] = remaining
        data["cores"] = [item for item in data["cores"] if item.get("projectId") != project_id]
        self._write(data)
        logger.info(f"Deleted project {project_id}")

    def get_core(self, project_id: str) -> Optional[ProjectCore]:
        for item in self._read()["cores"]:
            if item.get("projectId") == project_id:
                return ProjectCore.from_dict(item)
        return None

    def upsert_core(
        self,
        project_id: str,
        semantic_core_yaml: Optional[str] = None,
        manual_notes: Optional[str] = None,
        cluster_notes: Optional[Dict[str, ClusterNote]] = None
    ) -> ProjectCore:
        """
        Create or replace the project's semantic core.

        Raises:
            ValueError: If limits are exceeded
        """
        core = ProjectCore(
            project_id=project_id,
            semantic_core_yaml=semantic_core_yaml or "",
            manual_notes=manual_notes or "",
            cluster_notes=dict(cluster_notes or {}),
            updated_at=_utc_now_iso(),
        )
        validate_core(core)

        data = self._read()
        data["cores"] = [item for item in data["cores"] if item.get("projectId") != project_id]
        data["cores"].append(core.to_dict())
        self._write(data)
        logger.info(f"Stored semantic core for {project_id} ({len(core.semantic_core_yaml)} chars)")
        return core
