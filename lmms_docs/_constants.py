"""Common literal values used across lmms_docs.

These constants keep filenames, slugs and rendering defaults centralized so the
converter, the sync pipelines and tests import the same values without
drifting. Intended for internal use within the lmms_docs package.

Examples
--------
>>> from lmms_docs import _constants
>>> _constants.META_FILENAME
'meta.json'
>>> _constants.separator_label("Guides")
'---Guides---'
"""

META_FILENAME = "meta.json"
PAGE_SUFFIX = ".mdx"
LATEST_SLUG = "latest"
CHANGELOGS_DIR = "changelogs"
OTHERS_SECTION = "Others"

DEFAULT_BRANCH = "main"
DEFAULT_LINK_BASE = "/docs/lmms-engine"

IMAGE_WIDTH = 800
IMAGE_HEIGHT = 600


def separator_label(name: str) -> str:
    """Return the sidebar separator marker for a section name."""
    return f"---{name}---"
