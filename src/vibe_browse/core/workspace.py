"""Working-root directory layout.

The agent works inside a single root directory. Scripts it writes must land
in ``custom_scripts/``; screenshots, downloads and the persistent browser
profile each get their own subdirectory.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from vibe_browse.core.logging import logForDebugging

SCRIPTS_DIRNAME = "custom_scripts"
SCREENSHOTS_DIRNAME = "browser_screenshots"
DOWNLOADS_DIRNAME = "downloads"
PROFILE_DIRNAME = "browser_profile"


class WorkspaceLayout(BaseModel):
    """Absolute paths of every directory the session uses."""

    model_config = ConfigDict(frozen=True)

    root: Path
    scripts_dir: Path
    screenshots_dir: Path
    downloads_dir: Path
    profile_dir: Path

    @classmethod
    def for_root(cls, root: Path | str) -> "WorkspaceLayout":
        """Compute the layout for a working root without touching the disk."""
        base = Path(root).expanduser().absolute()
        return cls(
            root=base,
            scripts_dir=base / SCRIPTS_DIRNAME,
            screenshots_dir=base / SCREENSHOTS_DIRNAME,
            downloads_dir=base / DOWNLOADS_DIRNAME,
            profile_dir=base / PROFILE_DIRNAME,
        )

    def directories(self) -> list[Path]:
        return [
            self.root,
            self.scripts_dir,
            self.screenshots_dir,
            self.downloads_dir,
            self.profile_dir,
        ]


def ensure_directories(root: Path | str) -> WorkspaceLayout:
    """Create the working root and its subdirectories if they are missing.

    Safe to call any number of times; existing directories and their
    contents are left alone.

    Args:
        root: The working root directory.

    Returns:
        The WorkspaceLayout for ``root``.
    """
    layout = WorkspaceLayout.for_root(root)
    for directory in layout.directories():
        directory.mkdir(parents=True, exist_ok=True)
    logForDebugging(f"Workspace ready at {layout.root}")
    return layout
