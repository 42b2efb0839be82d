"""
Simulation storage abstraction.

Separates persistence from domain logic for testability.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from .schema import SimulationSave

logger = logging.getLogger(__name__)


@runtime_checkable
class CommitteeStore(Protocol):
    """
    Abstract storage interface for committee saves.

    Implementations:
    - JsonCommitteeStore: File-based persistence (production)
    - MemoryCommitteeStore: In-memory storage (testing)
    """

    def save(self, save: SimulationSave) -> bool:
        """Persist a save. Returns True on success."""
        ...

    def load(self, save_id: str) -> SimulationSave | None:
        """Load a save by ID. Returns None if not found."""
        ...

    def delete(self, save_id: str) -> bool:
        """Delete a save. Returns True if deleted."""
        ...

    def list_all(self) -> list[dict]:
        """List all saves with metadata."""
        ...

    def exists(self, save_id: str) -> bool:
        """Check if a save exists."""
        ...


class JsonCommitteeStore:
    """
    File-based storage using JSON.

    Features:
    - Automatic backup on save
    - Partial ID matching on load
    - Unreadable files load as a fresh save rather than failing
    """

    def __init__(self, saves_dir: Path | str = "saves"):
        self.saves_dir = Path(saves_dir)
        self.saves_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, save_id: str) -> Path:
        return self.saves_dir / f"{save_id}.json"

    def save(self, save: SimulationSave) -> bool:
        """Save to JSON file with backup."""
        save.save_checkpoint()
        save_file = self._path(save.id)

        try:
            # Backup previous save
            if save_file.exists():
                backup = save_file.with_suffix(".json.bak")
                backup.write_text(save_file.read_text(encoding="utf-8"), encoding="utf-8")

            save_file.write_text(save.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write save {save.id}: {e}")
            return False

        logger.debug(f"Saved {save.id} to {save_file}")
        return True

    def load(self, save_id: str) -> SimulationSave | None:
        """
        Load a save by ID or partial prefix.

        Returns None if no file matches. A file that exists but cannot be
        decoded yields an empty save with a logged warning.
        """
        save_file = self._path(save_id)

        if not save_file.exists():
            for f in self.saves_dir.glob("*.json"):
                # Skip config and other dotfiles stored alongside saves
                if f.name.startswith("."):
                    continue
                if f.stem.startswith(save_id):
                    save_file = f
                    break

        if not save_file.exists():
            return None

        try:
            raw = save_file.read_bytes()
        except OSError as e:
            logger.warning(f"Could not read {save_file}: {e}")
            return SimulationSave()

        return SimulationSave.from_json(raw)

    def delete(self, save_id: str) -> bool:
        """Delete save file."""
        save_file = self._path(save_id)
        if save_file.exists():
            save_file.unlink()
            return True
        return False

    def list_all(self) -> list[dict]:
        """
        List all saves sorted by modification time.

        Returns list of dicts with: id, name, saved_at
        """
        saves = []

        for f in sorted(
            self.saves_dir.glob("*.json"),
            key=lambda x: x.stat().st_mtime,
            reverse=True,
        ):
            if f.name.startswith("."):
                continue
            try:
                save = SimulationSave.model_validate_json(f.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                continue
            saves.append({
                "id": save.id,
                "name": save.name,
                "saved_at": save.saved_at,
            })

        return saves

    def exists(self, save_id: str) -> bool:
        """Check if save file exists."""
        return self._path(save_id).exists()


class MemoryCommitteeStore:
    """
    In-memory storage for testing.

    No file I/O - all data lives in memory.
    """

    def __init__(self):
        self.saves: dict[str, SimulationSave] = {}

    def save(self, save: SimulationSave) -> bool:
        save.save_checkpoint()
        self.saves[save.id] = save
        return True

    def load(self, save_id: str) -> SimulationSave | None:
        if save_id in self.saves:
            return self.saves[save_id]

        # Partial match
        for sid, save in self.saves.items():
            if sid.startswith(save_id):
                return save

        return None

    def delete(self, save_id: str) -> bool:
        if save_id in self.saves:
            del self.saves[save_id]
            return True
        return False

    def list_all(self) -> list[dict]:
        saves = [
            {"id": s.id, "name": s.name, "saved_at": s.saved_at}
            for s in self.saves.values()
        ]
        saves.sort(key=lambda x: x["saved_at"] or datetime.min, reverse=True)
        return saves

    def exists(self, save_id: str) -> bool:
        return save_id in self.saves

    def clear(self) -> None:
        """Clear all saves (test utility)."""
        self.saves.clear()
