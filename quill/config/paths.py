from dataclasses import dataclass
from pathlib import Path


@dataclass
class QuillPaths:
    """Centralizes filesystem paths for a Quill workspace."""

    root: Path

    @property
    def quill_dir(self) -> Path:
        return self.root / ".quill"

    @property
    def config_file(self) -> Path:
        return self.quill_dir / "quill.json"

    @property
    def logs_dir(self) -> Path:
        return self.quill_dir / "logs"

    @property
    def global_dir(self) -> Path:
        return Path.home() / ".quill"

    @property
    def global_config_file(self) -> Path:
        return self.global_dir / "quill.json"
