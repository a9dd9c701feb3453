"""Skill generation -- turn usage-rules files into Claude Code skills.

This sub-package holds the second half of the pipeline: deciding which
packages have usage rules and producing their ``SKILL.md`` files.

Exports:
    format_skill_name: Title-case a snake_case package name.
    format_skill_frontmatter: Render the YAML frontmatter for a package.
    format_skill_file: Assemble a complete skill file.
    enumerate_dependencies: Merge dependencies from several sources.
    find_packages_with_usage_rules: Keep dependencies that ship usage rules.
    get_package_description: Look up a package's self-description.
    sync_skills: Select packages and stage their skill files.
"""

from usage_skills.skills.discovery import (
    enumerate_dependencies,
    find_packages_with_usage_rules,
    get_package_description,
)
from usage_skills.skills.formatter import (
    format_skill_file,
    format_skill_frontmatter,
    format_skill_name,
)
from usage_skills.skills.sync import sync_skills

__all__ = [
    "enumerate_dependencies",
    "find_packages_with_usage_rules",
    "format_skill_file",
    "format_skill_frontmatter",
    "format_skill_name",
    "get_package_description",
    "sync_skills",
]
