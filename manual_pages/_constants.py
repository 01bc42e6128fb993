"""Common literal values used across manual_pages.

These constants keep filenames and metadata keys centralized so templates,
generators, and tests can import the same values without drifting.

Examples
--------
>>> from manual_pages import _constants
>>> _constants.PAGE_META_TEMPLATE.format(key="appraisals")
'.manual-appraisals-meta.json'
"""

PAGE_META_TEMPLATE = ".manual-{key}-meta.json"
DEFAULT_CONFIG_PATH = "config/manuals.yaml"
