"""Common literal values used across specdocs.

These constants keep filenames centralized so the generator, the site
renderer, and tests can import the same values without drifting. Intended for
internal use within the specdocs package.

Examples
--------
>>> from specdocs import _constants
>>> _constants.MANIFEST_FILENAME
'.openapi-docs-manifest.json'
>>> _constants.SITE_DIRNAME
'_site'
"""

MANIFEST_FILENAME = ".openapi-docs-manifest.json"
SITE_CONFIG_FILENAME = ".openapi-docs-site.json"
DEFAULT_CONFIG_FILENAME = "openapi-docs.yaml"
SITE_DIRNAME = "_site"
STYLESHEET_NAME = "style.css"
LLMS_INDEX_NAME = "llms.txt"
LLMS_FULL_NAME = "llms-full.txt"
UNTAGGED = "untagged"
