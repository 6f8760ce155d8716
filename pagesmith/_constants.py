"""Common literal values used across pagesmith.

These constants keep reserved filenames and defaults centralized so the
config loader, writer, and tests import the same values without drifting.

Examples
--------
>>> from pagesmith import _constants
>>> _constants.TEMPLATE_FILE_NAME
'template.jinja'
>>> _constants.HOMEPAGE_URL
'/'
"""

from pathlib import Path

TEMPLATE_FILE_NAME = "template.jinja"
HIGHLIGHT_CSS_FILE_NAME = "pygments.css"
PAGE_FILE_NAME = "index.html"
HOMEPAGE_URL = "/"

DEFAULT_CONFIG = Path("config.yml")
DEFAULT_OUTPUT_DIR = Path("_site")
DEFAULT_PORT = 3000
DEFAULT_PYGMENTS_STYLE = "monokai"
DEFAULT_TOC_DEPTH = 2
DEFAULT_BASE_URL = "/"
