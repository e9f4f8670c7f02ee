"""RPG Maker MV/MZ Localizer: shared constants."""

import re

# Regex matching RPG Maker escape codes that must never be translated.
# Order matters: bracketed codes first so \V[1] is not split into \V + [1].
ESCAPE_RE = re.compile(
    r'\\[A-Za-z0-9_]+\[[^\]\r\n]*\]'   # \V[1], \N[2], \C[3], \FS[24], etc.
    r'|\\\{[^}]*\}'                     # \{...} (may span line breaks)
    r'|\\[$.|!><^{}]'                   # \$, \., \|, \!, \>, \<, \^, lone \{ \}
)

# Speaker name markers in dialogue: <Name> or 【Name】
PERSON_NAME_RE = re.compile(r'<([^<>]+)>|【([^【】]+)】', re.DOTALL)

# Leading/trailing whitespace (ASCII and ideographic) kept aside while matching.
LEADING_SPACES_RE = re.compile(r'^\s+')
TRAILING_SPACES_RE = re.compile(r'\s+$')

# Plain integer token in a plugin command argument list.
NUMBER_TOKEN_RE = re.compile(r'^[+-]?\d+$')
