"""VTOL VR localization builder: language JSON <-> localization CSV."""

__version__ = "1.0.0"

# Placeholder written for keys that have no translated text yet.
PLACEHOLDER_FORMAT = "<localization.{key}>"

# Languages folder holds one JSON per language; en.json is the source text.
SOURCE_LANGUAGE = "en"
