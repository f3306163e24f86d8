import re

_CRATE_NAME_RE = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')

def is_valid_crate_name(text: object) -> bool:
    """
    Whether the text can be used as a dependency name:
    non-empty and identifier-like (ascii letters, digits and underscores, not starting with a digit).
    """
    return isinstance(text, str) and _CRATE_NAME_RE.fullmatch(text) is not None

def normalize_dashes(text: str) -> str:
    """
    Package names frequently contain dashes, crate names can't.
    """
    return text.replace('-', '_')

def crate_location(node: object) -> str:
    if isinstance(node, int) and not isinstance(node, bool):
        return f'crate #{node}'
    return '?'
