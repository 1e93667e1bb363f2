"""SKILL.md template text for newly generated skills."""

from typing import Optional

DEFAULT_DESCRIPTION = "[Describe what this skill does and when to use it]"

SKILL_BODY_TEMPLATE = """# {skill_name}

## Overview
[Provide a brief overview of what this skill does]

## When to Use
[Describe when agents should activate this skill]

## Instructions

### Step 1: [First step]
[Detailed instructions for the first step]

### Step 2: [Second step]
[Detailed instructions for the second step]

## Examples

### Example 1: [Scenario name]
**Input**: [Example input]
**Output**: [Example output]

## Edge Cases
[Document common edge cases and how to handle them]

## Notes
[Additional notes or considerations]
"""


def generate_skill_template(skill_name: str, description: Optional[str] = None) -> str:
    """Build SKILL.md content: frontmatter, a blank line, then the body."""
    frontmatter = (
        "---\n"
        f"name: {skill_name}\n"
        f"description: {description or DEFAULT_DESCRIPTION}\n"
        "---"
    )
    return f"{frontmatter}\n\n{SKILL_BODY_TEMPLATE.format(skill_name=skill_name)}"
