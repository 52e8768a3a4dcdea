"""Reserved identifiers used in generated code."""

from __future__ import annotations

# Synthetic leading parameter of every compiled unit
BUFFER_PARAM = "__buffer__"

# Keyword-only child block parameter, added when the body uses it
BLOCK_PARAM = "block"

# Function returned by the generated module; closes over helpers and free variables
FACTORY_NAME = "__tagcraft_factory__"

# The unit function inside the factory, renamed after the template once built;
# a template name here would hide the template from its own body
UNIT_FUNCTION = "__tagcraft_unit__"

# Defer mode state
ORIG_BUFFER = "__orig_buffer__"
PARTS = "__parts__"

# Runtime helpers passed to the factory, see tagcraft.template.helpers
ESCAPE = "__escape__"
TO_TEXT = "__text__"
ATTRS = "__attrs__"
TAG_NAME = "__tag__"
CLOSE_TAG = "__close_tag__"
UNIT = "__unit__"
EXTENSION = "__extension__"
RENDER = "__render__"
MARKDOWN = "__markdown__"
REQUIRE_BLOCK = "__require_block__"
RUN_PARTS = "__run_parts__"

HELPER_NAMES: tuple[str, ...] = (
    ESCAPE,
    TO_TEXT,
    ATTRS,
    TAG_NAME,
    CLOSE_TAG,
    UNIT,
    EXTENSION,
    RENDER,
    MARKDOWN,
    REQUIRE_BLOCK,
    RUN_PARTS,
)
