"""
Message personalization.

Templates use a closed set of ``{{placeholder}}`` names. Known placeholders
are replaced with the lead's field (empty string when missing); anything else
is left in the text untouched.
"""

import re
from typing import Any, Dict, List, Optional

# Placeholder -> lead personalization field
PLACEHOLDERS = {
    '{{firstName}}': 'firstName',
    '{{lastName}}': 'lastName',
    '{{phone}}': 'phone',
    '{{email}}': 'email',
}

PLACEHOLDER_PATTERN = re.compile(r'\{\{\s*[^{}]+?\s*\}\}')


def hydrate(template: str, entity: Optional[Dict[str, Any]]) -> str:
    """Replace the known placeholders of ``template`` with values from ``entity``."""
    if not template:
        return ""
    
    fields = entity or {}
    
    def substitute(match):
        field = PLACEHOLDERS.get(match.group(0))
        if field is None:
            return match.group(0)
        value = fields.get(field)
        return '' if value is None else str(value)
    
    # Single pass: substituted values are never scanned again
    return PLACEHOLDER_PATTERN.sub(substitute, template)


def find_placeholders(template: str) -> List[str]:
    """All ``{{...}}`` tokens of a template, in order of appearance."""
    if not template:
        return []
    return PLACEHOLDER_PATTERN.findall(template)


def unknown_placeholders(template: str) -> List[str]:
    """Placeholders that ``hydrate`` will leave as-is."""
    return [p for p in find_placeholders(template) if p not in PLACEHOLDERS]


def get_available_placeholders() -> Dict[str, str]:
    """Placeholders and their descriptions, for the sequence editor."""
    return {
        '{{firstName}}': "Lead's first name",
        '{{lastName}}': "Lead's last name",
        '{{phone}}': "Lead's phone number",
        '{{email}}': "Lead's email address",
    }
