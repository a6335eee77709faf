"""About-section blocks stored as JSON in ``About.content``."""

import json
import uuid

BLOCK_TYPES = ("text", "skills", "achievements", "timeline", "stats", "image")

# Keys every item of a list block must carry
ITEM_KEYS = {
    "achievements": ("title", "description"),
    "timeline": ("year", "title", "description"),
    "stats": ("label", "value"),
}


def new_block_id() -> str:
    return uuid.uuid4().hex[:12]


def decode_blocks(content):
    """Blocks for ``content``; plain legacy text becomes one text block."""
    if not content:
        return []
    try:
        parsed = json.loads(content)
    except (TypeError, ValueError):
        parsed = None
    if isinstance(parsed, list):
        return [b for b in parsed if isinstance(b, dict) and b.get("type") in BLOCK_TYPES]
    return [{"id": "legacy", "type": "text", "data": {"content": content}}]


def encode_blocks(blocks) -> str:
    return json.dumps(blocks, ensure_ascii=False)


def clean_block(block):
    """Validate one block and return its normalized form.

    Raises ``ValueError`` with a user-facing message.
    """
    if not isinstance(block, dict):
        raise ValueError("Each block must be an object.")
    btype = block.get("type")
    if btype not in BLOCK_TYPES:
        raise ValueError(f"Unknown block type: {btype!r}.")
    data = block.get("data") or {}
    if not isinstance(data, dict):
        raise ValueError(f"Block data for {btype} must be an object.")

    if btype == "text":
        data = {"content": str(data.get("content", ""))}
    elif btype == "skills":
        items = data.get("items") or []
        if not isinstance(items, list):
            raise ValueError("Skills block items must be a list.")
        data = {"items": [str(i) for i in items if str(i).strip()]}
    elif btype == "image":
        data = {"url": str(data.get("url", "")), "alt": str(data.get("alt", ""))}
    else:
        items = data.get("items") or []
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            raise ValueError(f"{btype.capitalize()} block items must be a list of objects.")
        keys = ITEM_KEYS[btype]
        data = {"items": [{k: str(i.get(k, "")) for k in keys} for i in items]}

    return {"id": str(block.get("id") or new_block_id()), "type": btype, "data": data}
