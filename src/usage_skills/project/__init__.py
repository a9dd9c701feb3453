"""Project introspection -- read manifests and list declared dependencies.

This sub-package is the first stage of the usage-skills pipeline: it turns a
project directory into :class:`~usage_skills.models.Dependency` records that
the discovery stage can check for usage-rules files.

Typical usage::

    from usage_skills.project import default_sources
    from usage_skills.workspace import LocalFileSource

    files = LocalFileSource(".")
    for source in default_sources(files):
        print(source.name, source.list_dependencies())

Sub-modules:

* :mod:`~usage_skills.project.manifest` -- ``mix.exs`` reading and parsing.
* :mod:`~usage_skills.project.sources` -- The :class:`DependencySource`
  adapter interface and its implementations.
"""

from usage_skills.project.manifest import load_manifest, parse_manifest
from usage_skills.project.sources import (
    USAGE_RULES_FILENAME,
    DependencySource,
    MixProjectSource,
    UmbrellaProjectSource,
    VendoredDepsSource,
    default_sources,
)

__all__ = [
    "USAGE_RULES_FILENAME",
    "DependencySource",
    "MixProjectSource",
    "UmbrellaProjectSource",
    "VendoredDepsSource",
    "default_sources",
    "load_manifest",
    "parse_manifest",
]
